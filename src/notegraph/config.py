"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Preferences
    render_mode_preference_key: str = "notegraph.render_mode"
    default_render_mode: str = "internal"
    default_performance_mode: str = "auto"

    # Link Generator
    internal_link_saturation: int = Field(
        default=3,
        description="Occurrences of a [[Title]] pair that saturate strength at 1.0"
    )
    similarity_threshold: float = Field(
        default=0.3,
        description="Minimum keyword Jaccard ratio for a similarity link"
    )
    similarity_min_token_length: int = 3
    similarity_node_ceiling: int = Field(
        default=300,
        description="Above this many notes similarity links are sampled"
    )
    similarity_sample_window: int = Field(
        default=50,
        description="Notes compared per note when sampling similarity links"
    )

    # Node sizing
    node_min_size: float = 20.0
    node_max_size: float = 60.0
    node_base_size: float = 30.0
    node_size_per_kchar: float = 5.0
    node_size_per_tag: float = 2.0
    node_initial_radius: float = 200.0
    untagged_node_color: str = "#6c757d"

    # Filter Pipeline
    content_length_threshold: int = 100
    small_node_max_size: float = 25.0
    medium_node_max_size: float = 40.0

    # Optimization Governor
    quality_node_threshold: int = Field(
        default=100,
        description="Node count above which links start being dropped"
    )
    performance_node_threshold: int = Field(
        default=500,
        description="Hard cap on render-ready nodes at the high level"
    )
    medium_link_drop_fraction: float = Field(
        default=0.3,
        description="Trailing fraction of links dropped at the medium level"
    )

    # Layout Simulator
    layout_link_distance: float = 100.0
    layout_link_stiffness: float = 0.3
    layout_charge_strength: float = -300.0
    layout_charge_distance_max: float = 300.0
    layout_center_strength: float = 0.1
    layout_collision_margin: float = 20.0
    layout_collision_strength: float = 0.7
    layout_alpha_decay: float = 0.02
    layout_alpha_min: float = 0.001
    layout_velocity_decay: float = 0.4
    layout_reheat_alpha: float = 0.3
    layout_drag_alpha_target: float = 0.3
    layout_seed: int = 42

    # Viewport Controller
    zoom_min: float = 0.1
    zoom_max: float = 3.0
    zoom_step: float = 1.2
    canvas_width: int = 800
    canvas_height: int = 600
    click_tolerance: float = Field(
        default=3.0,
        description="Pointer travel in pixels below which a gesture is a click"
    )

    # Renderer
    minimap_width: int = 160
    minimap_height: int = 120
    label_char_width: float = 7.0

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(api_debug=True)


def get_prod_settings() -> Settings:
    """Get production environment settings.

    Lower ceilings keep the O(n²) stages inside the frame budget on small
    machines.
    """
    return Settings(
        similarity_node_ceiling=200,
        performance_node_threshold=400,
    )


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(layout_seed=7)


# Global settings instance
settings = Settings()
