from .azure import AzureOpenAIService
from .claude import ClaudeService
from .gemini import GeminiService
from .groq import GroqService
from .openai import OpenAIService

__all__ = ["AzureOpenAIService", "ClaudeService", "GeminiService", "GroqService", "OpenAIService"]
