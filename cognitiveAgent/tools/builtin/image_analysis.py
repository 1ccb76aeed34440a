"""Image-analysis tool: describes a descriptor from an earlier step or the attachment."""

from __future__ import annotations

from cognitiveAgent.session.schema import ImageDescriptor, StepStatus, ToolKind
from cognitiveAgent.utils.error_handler import StepExecutionError

from ..registry import ToolContext, ToolOutcome


def _band(score: float, low: str, mid: str, high: str) -> str:
    if score < 0.34:
        return low
    if score < 0.67:
        return mid
    return high


def describe_descriptor(descriptor: ImageDescriptor) -> str:
    return (
        f'Image {descriptor.id} depicting "{descriptor.concept}": '
        f"{_band(descriptor.composition, 'loosely arranged', 'balanced', 'tightly composed')} layout, "
        f"{_band(descriptor.palette, 'muted', 'moderate', 'vivid')} palette, "
        f"{_band(descriptor.detail, 'sparse', 'moderate', 'intricate')} detail, "
        f"{_band(descriptor.coherence, 'ambiguous', 'recognizable', 'unmistakable')} rendering of the concept "
        f"(composition {descriptor.composition:.2f}, palette {descriptor.palette:.2f}, "
        f"detail {descriptor.detail:.2f}, coherence {descriptor.coherence:.2f})."
    )


def image_analysis_handler(ctx: ToolContext) -> ToolOutcome:
    """Synchronous; an unusable reference is a step-local error."""
    step = ctx.step
    ref = step.params.input_ref

    if ref is None:
        if ctx.attachment is None:
            raise StepExecutionError("Invalid reference: no image step referenced and no image attached")
        description = (
            f"User-provided image ({ctx.attachment.mime_type}, about "
            f"{ctx.attachment.approx_bytes // 1024} KB)"
            + (f' named "{ctx.attachment.name}"' if ctx.attachment.name else "")
            + "."
        )
    else:
        if ref >= step.ordinal:
            raise StepExecutionError(f"Invalid reference: step {ref} does not precede step {step.ordinal}")
        source = next((s for s in ctx.plan if s.ordinal == ref), None)
        if source is None or source.tool is not ToolKind.IMAGE_SYNTHESIS:
            raise StepExecutionError(f"Invalid reference: step {ref} is not an image synthesis step")
        if source.status is not StepStatus.COMPLETE or not isinstance(source.result, ImageDescriptor):
            raise StepExecutionError(f"Invalid reference: step {ref} produced no image")
        description = describe_descriptor(source.result)

    if step.params.prompt:
        description += f" Requested focus: {step.params.prompt}"
    return ToolOutcome(
        payload=description,
        text=f"Step {step.ordinal} ({step.description}) Result: {description}",
    )
