"""Azure OpenAI adapter.

Same wire protocol as OpenAI; the deployment name stands in for the model and
the client is bound to a resource endpoint and API version.
"""

from openai import AsyncAzureOpenAI

from ..models import AzureOpenAIConfig
from .openai import OpenAIService


class AzureOpenAIService(OpenAIService):
    """Azure OpenAI adapter.

    Hidden design decisions:
    - Endpoint, deployment and API version binding
    - Everything else is inherited from the OpenAI adapter
    """

    _config: AzureOpenAIConfig

    @property
    def provider_name(self) -> str:
        return "Azure OpenAI"

    def _init_client(self) -> AsyncAzureOpenAI | None:
        cfg = self._config
        if not (cfg.api_key and cfg.endpoint and cfg.deployment_name):
            return None
        return AsyncAzureOpenAI(
            api_key=cfg.api_key,
            azure_endpoint=cfg.endpoint,
            azure_deployment=cfg.deployment_name,
            api_version=cfg.api_version,
            max_retries=0,
        )

    @property
    def _model(self) -> str:
        return self._config.deployment_name
