from .openai import OpenAIImageProvider

__all__ = ["OpenAIImageProvider"]
