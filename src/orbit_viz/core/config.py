"""Configuration dataclasses for the orbital visualization."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LayoutCfg:
    folder_ring_radius: float = 80.0
    folder_band_height: float = 20.0
    cluster_radius: float = 40.0
    orbit_clearance: float = 10.0
    boundary_padding: float = 30.0
    empty_boundary_radius: float = 50.0
    planet_radii: dict[str, float] = field(
        default_factory=lambda: {
            "small": 1.7,
            "medium": 3.3,
            "large": 6.0,
            "massive": 8.3,
        }
    )
    default_planet_radius: float = 3.3


@dataclass(frozen=True)
class OrbitCfg:
    gravitational_constant: float = 1.0
    transfer_samples: int = 64
    default_folder_mass: float = 1000.0
    origin_mass: float = 10_000.0
    folder_reference_radius: float = 80.0
    planet_reference_radius: float = 15.0
    folder_assist_multiplier: float = 1.5
    planet_assist_multiplier: float = 1.2
    max_assist_multiplier: float = 2.5
    recalculation_threshold: float = 5.0
    planet_masses: dict[str, float] = field(
        default_factory=lambda: {
            "small": 100.0,
            "medium": 300.0,
            "large": 700.0,
            "massive": 1500.0,
        }
    )
    base_orbit_speeds: dict[str, float] = field(
        default_factory=lambda: {
            "small": 0.15,
            "medium": 0.12,
            "large": 0.08,
            "massive": 0.05,
        }
    )
    default_orbit_speed: float = 0.1
    orbit_speed_normalizer: float = 30.0
    spin_speed: float = 0.1
    orbit_line_segments: int = 128
    accretion_ring_speed: float = 0.5

    @property
    def origin_gm(self) -> float:
        return self.gravitational_constant * self.origin_mass


@dataclass(frozen=True)
class TextureCfg:
    size: int = 512
    noise_scale: float = 4.0
    height_octaves: int = 6
    height_persistence: float = 0.5
    variation_scale: float = 20.0
    variation_amplitude: float = 10.0


@dataclass(frozen=True)
class IndicatorCfg:
    speeds: dict[str, float] = field(
        default_factory=lambda: {
            "daily": 0.8,
            "weekly": 0.4,
            "monthly": 0.15,
            "one_time": 0.3,
        }
    )
    default_speed: float = 0.3
    speed_normalizer: float = 0.05
    lookahead_progress: float = 0.02
    trail_length: int = 20
    trail_max_size: float = 0.6
    trail_max_opacity: float = 0.6
    glow_pulse_rate: float = 10.0
    pick_radius: float = 1.5
    priority_colors: dict[str, tuple[int, int, int]] = field(
        default_factory=lambda: {
            "critical": (255, 69, 0),
            "high": (255, 140, 0),
            "medium": (255, 215, 0),
            "low": (74, 158, 255),
        }
    )
    default_color: tuple[int, int, int] = (74, 158, 255)


@dataclass(frozen=True)
class CameraCfg:
    home_position: tuple[float, float, float] = (150.0, 80.0, 150.0)
    home_look_at: tuple[float, float, float] = (0.0, -10.0, 0.0)
    folder_offset: tuple[float, float, float] = (80.0, 60.0, 80.0)
    pov_follow_distance: float = 25.0
    pov_height: float = 12.0
    pov_lookahead: float = 15.0
    base_lerp_speed: float = 2.0
    min_lerp_speed: float = 2.0
    max_lerp_speed: float = 10.0
    drag_velocity_scale: float = 20.0
    min_distance: float = 20.0
    max_distance: float = 600.0
    drag_sensitivity: float = 0.005
    wheel_zoom_factor: float = 1.1


@dataclass(frozen=True)
class SceneCfg:
    max_frame_delta: float = 0.1
    home_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    home_radius: float = 12.0
    home_ring_speeds: tuple[float, float] = (0.3, -0.2)
    massive_body_radius: float = 3.0
    critical_pulse_rate: float = 3.0
    thriving_particle_count: int = 50
    moon_max_count: int = 4
    record_every_ticks: int = 10


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1280
    height: int = 800
    fov_degrees: float = 50.0
    near_plane: float = 0.1
    far_plane: float = 2000.0
    background_color: tuple[int, int, int] = (0, 5, 16)
    star_count: int = 400
    label_color: tuple[int, int, int] = (234, 241, 255)
    orbit_line_alpha: int = int(255 * 0.3)
    boundary_alpha: int = int(255 * 0.18)
    home_color: tuple[int, int, int] = (255, 0, 255)
    home_ring_colors: tuple[tuple[int, int, int], tuple[int, int, int]] = (
        (255, 0, 255),
        (0, 255, 255),
    )
    critical_glow_color: tuple[int, int, int] = (255, 0, 0)
    thriving_halo_color: tuple[int, int, int] = (255, 255, 0)
    completed_ring_color: tuple[int, int, int] = (0, 255, 0)
    max_sprite_diameter: int = 1024
    fps_text_alpha: int = int(255 * 0.6)


LAYOUT_CFG = LayoutCfg()
ORBIT_CFG = OrbitCfg()
TEXTURE_CFG = TextureCfg()
INDICATOR_CFG = IndicatorCfg()
CAMERA_CFG = CameraCfg()
SCENE_CFG = SceneCfg()
RENDER_CFG = RenderCfg()


__all__ = [
    "CAMERA_CFG",
    "INDICATOR_CFG",
    "LAYOUT_CFG",
    "ORBIT_CFG",
    "RENDER_CFG",
    "SCENE_CFG",
    "TEXTURE_CFG",
    "CameraCfg",
    "IndicatorCfg",
    "LayoutCfg",
    "OrbitCfg",
    "RenderCfg",
    "SceneCfg",
    "TextureCfg",
]
