import logging
from textwrap import shorten

import httpx

from imagestudio.config import get_settings
from imagestudio.schemas.generation import AspectRatio

logger = logging.getLogger(__name__)

MAX_ERROR_DETAIL_LENGTH = 300


class ImageGenerationError(Exception):
    """Raised when the image generation service cannot produce an image."""


class ImagenService:
    """
    Service for generating images using Google's Imagen models through the
    Generative Language REST API.

    Returns the generated image as a data URI so it can be used directly as
    an image source without storing it anywhere.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta/models",
        model: str = "imagen-4.0-generate-001",
        output_mime_type: str = "image/jpeg",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.output_mime_type = output_mime_type
        self.timeout = timeout
        self._transport = transport

    def _build_payload(self, prompt: str, aspect_ratio: AspectRatio) -> dict:
        return {
            "instances": [
                {"prompt": prompt}
            ],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio.value,
                "outputMimeType": self.output_mime_type,
            }
        }

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """
        Pull the provider's error message out of a failed response.

        Bodies that are not the provider's JSON error (proxy pages and the
        like) are reduced to the status line.
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return shorten(str(error["message"]), width=MAX_ERROR_DETAIL_LENGTH, placeholder="...")
        return response.reason_phrase or "Unexpected response"

    async def generate(self, prompt: str, aspect_ratio: AspectRatio) -> str:
        """
        Generate a single image for a prompt.

        Args:
            prompt: Text description of the image
            aspect_ratio: Output image aspect ratio (1:1, 3:4, 4:3, 9:16, 16:9)

        Returns:
            A ``data:`` URI holding the base64-encoded image

        Raises:
            ImageGenerationError: on any failure, with a message fit for display
        """
        if not self.api_key:
            raise ImageGenerationError("Image generation API key is not configured.")

        url = f"{self.base_url}/{self.model}:predict"
        payload = self._build_payload(prompt, aspect_ratio)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self.api_key,
                    }
                )
        except httpx.HTTPError as e:
            logger.warning("Image generation request to %s failed: %r", url, e)
            raise ImageGenerationError("Could not reach the image generation service.") from e

        if response.status_code != 200:
            error_detail = self._error_detail(response)
            logger.warning("Image generation API error (%s): %s", response.status_code, error_detail)
            raise ImageGenerationError(
                f"Image generation failed ({response.status_code}): {error_detail}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ImageGenerationError(
                "The image generation service returned an invalid response."
            ) from e

        # Extract the first generated image from the response
        predictions = result.get("predictions") if isinstance(result, dict) else None
        for prediction in predictions or []:
            if isinstance(prediction, dict) and prediction.get("bytesBase64Encoded"):
                mime_type = prediction.get("mimeType") or self.output_mime_type
                return f"data:{mime_type};base64,{prediction['bytesBase64Encoded']}"

        raise ImageGenerationError("No image was generated. Please try a different prompt.")


def get_imagen_service() -> ImagenService:
    settings = get_settings()
    return ImagenService(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_api_url,
        model=settings.imagen_model,
        output_mime_type=settings.output_mime_type,
        timeout=settings.request_timeout,
    )
