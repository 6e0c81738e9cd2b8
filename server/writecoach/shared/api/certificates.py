"""
Certificate catalogue endpoints.
"""

from fastapi import APIRouter

from ..core.dependencies import InitializerDep
from ..core.exceptions import InvalidCertificateError
from ..models.responses import Certificate, CertificatesResponse


router = APIRouter(
    tags=["certificates"]
)


@router.get("/certificates", response_model=CertificatesResponse)
async def list_certificates(initializer: InitializerDep):
    """List the certificates topics can be generated for."""
    certificates = initializer.list_certificates()
    return CertificatesResponse(certificates=certificates, total_count=len(certificates))


@router.get("/certificates/{certificate_id}", response_model=Certificate)
async def get_certificate(certificate_id: str, initializer: InitializerDep):
    certificate = initializer.get_certificate(certificate_id)
    if certificate is None:
        raise InvalidCertificateError(certificate_id)
    return certificate
