from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(BaseSettings):
    """
    Load runtime configuration from environment variables.

    :param vision_api_key: API key for the OpenAI-compatible vision endpoint.
    :param vision_base_url: Base URL of the vision endpoint.
    :param vision_model_name: Vision-language model used to read labels.
    :param vision_timeout: Request timeout in seconds.
    :param log_level: Minimal log level for :func:`configure_logging`.
    """
    vision_api_key: str
    vision_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    vision_model_name: str = "gemini-2.0-flash"
    vision_timeout: float = 60.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def from_env(cls, env_path: str | None = None) -> "Env":
        """
        Create configuration from environment variables and optional `.env` path.

        :param env_path: Optional path to a `.env` file. Uses default `.env` when omitted.
        :return: Loaded configuration object.
        """
        return cls(_env_file=env_path) if env_path else cls()
