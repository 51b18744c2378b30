from __future__ import annotations

from pydantic import BaseModel, Field

from .registry import register
from .base import Generator, GenerationContext
from ..schemas.session import ErrorResult, GenerationResult, ImageUrlResult

NO_IMAGE = "No image returned."


class ImageGeneratorSettings(BaseModel):
    size: str = Field(default="512x512", description="Output resolution, WIDTHxHEIGHT")
    n: int = Field(default=1, ge=1, le=10, description="Images to request; only the first is shown")


@register("image")
class ImageGenerator(Generator):
    content_type = "image"
    summary = "Generate an image from the prompt and return its URL"
    settings_model = ImageGeneratorSettings

    async def run(self, prompt: str, ctx: GenerationContext) -> GenerationResult:
        s = self.settings
        size = s.get("size") or "512x512"
        await ctx.logger("generate.image: sending", {"size": size, "prompt_preview": prompt[:500]})

        response = await ctx.client.images.generate(
            prompt=prompt,
            n=int(s.get("n") or 1),
            size=size,  # type: ignore[arg-type]
        )
        data = getattr(response, "data", None) or []
        url = getattr(data[0], "url", None) if data else None

        await ctx.logger("generate.image: received", {"images": len(data), "has_url": bool(url)})
        if not url:
            return ErrorResult(message=NO_IMAGE)
        return ImageUrlResult(url=url)
