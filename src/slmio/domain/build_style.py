"""Laser parameter sets.

A BuildStyle is the named set of laser and exposure parameters that a
geometry item references through its ``bid``. Build styles are owned by a
single Model and are never shared between models.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class LaserMode(Enum):
    """Laser emission mode.

    ``DEFAULT`` is an alias of ``PULSE``.
    """

    CW = 0
    PULSE = 1
    DEFAULT = 1


@dataclass
class BuildStyle:
    """A set of laser parameters applied to geometry referencing it.

    Units follow the usual machine conventions: power in W, speed in mm/s,
    focus in mm, point distance in microns and times/delays in microseconds.

    Attributes:
        bid: Build style id, unique within the owning model
        name: Short name
        description: Free text description
        laser_power: Laser power
        laser_speed: Laser scan speed; 0 means derive from the point
            exposure parameters (the rule belongs to the concrete format)
        laser_focus: Focus offset
        point_distance: Distance between exposure points
        point_exposure_time: Exposure time per point
        laser_id: Id of the laser source on multi-laser systems
        laser_mode: Pulsed or continuous-wave emission
        point_delay: Delay between exposure points
        jump_delay: Delay after a jump
        jump_speed: Speed of jumps between scan vectors
        extras: Optional host-attached metadata, never read by slmio
    """

    bid: int = 0
    name: str = ""
    description: str = ""
    laser_power: float = 0.0
    laser_speed: float = 0.0
    laser_focus: float = 0.0
    point_distance: int = 0
    point_exposure_time: int = 0
    laser_id: int = 1
    laser_mode: LaserMode = LaserMode.PULSE
    point_delay: int = 0
    jump_delay: int = 0
    jump_speed: int = 0
    extras: dict[str, Any] = field(default_factory=dict)

    def set_style(
        self,
        bid: int,
        focus: float,
        power: float,
        point_exposure_time: int,
        point_exposure_distance: int,
        speed: float = 0.0,
        laser_id: int = 1,
        laser_mode: LaserMode = LaserMode.PULSE,
    ) -> None:
        """Set the main parameters of the build style in one call.

        Args:
            bid: Build style id
            focus: Laser focus offset
            power: Laser power
            point_exposure_time: Exposure time per point
            point_exposure_distance: Distance between exposure points
            speed: Laser speed (0 = derive from exposure time and distance)
            laser_id: Laser source id
            laser_mode: Laser emission mode
        """
        self.bid = bid
        self.laser_focus = focus
        self.laser_power = power
        self.point_exposure_time = point_exposure_time
        self.point_distance = point_exposure_distance
        self.laser_speed = speed
        self.laser_id = laser_id
        self.laser_mode = laser_mode

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with one entry per parameter
        """
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["laser_mode"] = self.laser_mode.value
        data["extras"] = dict(self.extras)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildStyle":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a build style

        Returns:
            BuildStyle instance

        Raises:
            KeyError: If a parameter is missing
            ValueError: If the laser mode is unknown
        """
        values = {f.name: data[f.name] for f in fields(cls) if f.name != "extras"}
        values["laser_mode"] = LaserMode(values["laser_mode"])
        return cls(**values, extras=dict(data.get("extras", {})))
