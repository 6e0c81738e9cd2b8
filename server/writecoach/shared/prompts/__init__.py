from .templates import build_evaluator_prompt, build_topic_prompt

__all__ = ["build_evaluator_prompt", "build_topic_prompt"]
