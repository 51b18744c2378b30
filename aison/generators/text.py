from __future__ import annotations

from pydantic import BaseModel, Field

from .registry import register
from .base import Generator, GenerationContext
from ..schemas.session import GenerationResult, TextResult

NO_RESPONSE = "No response received."


class TextGeneratorSettings(BaseModel):
    model: str = Field(default="gpt-3.5-turbo-instruct", description="Completions model")
    max_tokens: int = Field(default=150, ge=1, description="Maximum tokens in the completion")


@register("text")
class TextGenerator(Generator):
    content_type = "text"
    summary = "Complete the prompt with the legacy completions endpoint"
    settings_model = TextGeneratorSettings

    async def run(self, prompt: str, ctx: GenerationContext) -> GenerationResult:
        s = self.settings
        model = s.get("model") or "gpt-3.5-turbo-instruct"
        await ctx.logger(f"generate.text: sending [{model}]", {"model": model, "prompt_preview": prompt[:500]})

        completion = await ctx.client.completions.create(
            model=model,
            prompt=prompt,
            max_tokens=int(s.get("max_tokens") or 150),
        )
        choices = getattr(completion, "choices", None) or []
        text = getattr(choices[0], "text", None) if choices else None

        await ctx.logger(
            f"generate.text: received [{model}]",
            {"choices": len(choices), "text_preview": (text or "")[:1000]},
        )
        return TextResult(text=text or NO_RESPONSE)
