"""Configuration for the force-directed layout."""

from dataclasses import dataclass

from notegraph.config import Settings, settings


@dataclass
class ForceConfig:
    """Force and integration parameters for the layout simulator."""

    # Link attraction: rest length = link_distance / strength
    link_distance: float = 100.0
    link_stiffness: float = 0.3  # Scaled by link strength

    # Charge repulsion: strength * size / 30, zero beyond distance_max
    charge_strength: float = -300.0
    charge_distance_max: float = 300.0

    # Weak pull toward the canvas centre (graph origin)
    center_strength: float = 0.1

    # Collision: separation = size_a + size_b + margin
    collision_margin: float = 20.0
    collision_strength: float = 0.7

    # Integration
    alpha_decay: float = 0.02
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    reheat_alpha: float = 0.3
    drag_alpha_target: float = 0.3

    seed: int = 42

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "ForceConfig":
        """Build from application settings."""
        s = source or settings
        return cls(
            link_distance=s.layout_link_distance,
            link_stiffness=s.layout_link_stiffness,
            charge_strength=s.layout_charge_strength,
            charge_distance_max=s.layout_charge_distance_max,
            center_strength=s.layout_center_strength,
            collision_margin=s.layout_collision_margin,
            collision_strength=s.layout_collision_strength,
            alpha_decay=s.layout_alpha_decay,
            alpha_min=s.layout_alpha_min,
            velocity_decay=s.layout_velocity_decay,
            reheat_alpha=s.layout_reheat_alpha,
            drag_alpha_target=s.layout_drag_alpha_target,
            seed=s.layout_seed,
        )
