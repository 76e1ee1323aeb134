"""Parameter checks shared by the material registries."""

from collections.abc import Sequence


def check_unit_colour(name: str, colour: Sequence[float]) -> None:
    """Reject colours with a channel outside [0, 1].

    Raises:
        ValueError: If the colour does not have three channels, or if any
            channel is outside [0, 1] (which would let a bounce add energy).
    """
    if len(colour) != 3:
        raise ValueError(f"{name} colour must have 3 components, got {len(colour)}")
    for i, component in enumerate(colour):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


def check_roughness(roughness: float) -> None:
    """Reject roughness values outside [0, 1].

    Raises:
        ValueError: If roughness is outside [0, 1].
    """
    if roughness < 0.0 or roughness > 1.0:
        raise ValueError(
            f"Roughness = {roughness} is outside [0, 1]. "
            "Roughness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )
