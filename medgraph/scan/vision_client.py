from typing import Any, Sequence

from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
)

from medgraph.common.env import Env
from medgraph.common.exceptions import ScanError
from medgraph.common.logger import logger
from medgraph.scan.parsing import parse_image_data_url
from medgraph.scan.prompts import render_label_prompt


def _log_retry(retry_state: RetryCallState) -> None:
    logger.debug(
        f"[VisionClient] Attempt {retry_state.attempt_number} failed: "
        f"{retry_state.outcome.exception() if retry_state.outcome else None}; retrying"
    )


class VisionClient:
    """
    Asynchronous client for an OpenAI-compatible vision-language model.

    Sends one label photo with the extraction instruction and returns the
    model's raw text; parsing that text is left to :mod:`medgraph.scan.parsing`.
    """

    def __init__(
        self,
        model_name: str,
        base_url: str,
        api_key: str,
        request_timeout: float = 60.0,
        retry_times: Sequence[float] = (4, 10),
        prompt: str | None = None,
        **openai_kwargs: Any,
    ):
        """
        :param model_name: Vision model identifier.
        :param base_url: Base API endpoint.
        :param api_key: Authentication token.
        :param request_timeout: Request timeout in seconds.
        :param retry_times: Waits (seconds) before each retry; empty disables retrying.
        :param prompt: Pre-rendered instruction. Defaults to the label extraction prompt.
        :param openai_kwargs: Additional keyword arguments passed to AsyncOpenAI.
        """
        self.model_name = model_name
        self.retry_times = list(retry_times)
        self.prompt = prompt or render_label_prompt()
        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=request_timeout,
            **openai_kwargs,
        )

    @classmethod
    def from_env(cls, env: Env | None = None) -> "VisionClient":
        env = env or Env.from_env()
        return cls(
            model_name=env.vision_model_name,
            base_url=env.vision_base_url,
            api_key=env.vision_api_key,
            request_timeout=env.vision_timeout,
        )

    async def analyze(self, image_data_url: str) -> str:
        """
        Ask the model to read a medication label.

        :param image_data_url: Photo as a ``data:image/...;base64,...`` URL.
        :return: Raw model text.
        :raises InvalidInputError: If the image is not a base64 data URL.
        :raises ScanError: If the request keeps failing after retries.
        """
        mime_type, _ = parse_image_data_url(image_data_url)
        logger.info(f"[VisionClient] Sending {mime_type} image to {self.model_name} for analysis...")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(len(self.retry_times) + 1),
            wait=wait_chain(*[wait_fixed(t) for t in self.retry_times]) if self.retry_times else wait_fixed(0),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            text = await retrying(self._complete, image_data_url)
        except Exception as e:
            logger.exception(f"[VisionClient] request failed after retries: {e}")
            raise ScanError("Failed to analyze medication image") from e

        logger.debug(f"[VisionClient] Raw response: {text[:200]}...")
        return text

    async def _complete(self, image_data_url: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.prompt},
                        {"type": "image_url", "image_url": {"url": image_data_url}},
                    ],
                }
            ],
        )
        content = response.choices[0].message.content
        return content if content is not None else ""

    async def async_close(self) -> None:
        await self.client.close()
