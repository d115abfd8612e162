#!/usr/bin/env python

# Copyright 2026 Martin Junius
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# ChangeLog
# Version 0.1 / 2026-10-19
#       Dataclasses and exceptions for the eclipse geometry modules

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclclasses"
DESCRIPTION = "Dataclasses for solar eclipse geometry"

import math
from dataclasses import dataclass, field, replace, asdict
from enum import Enum

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from astroutils import geodetic_to_efi, jt_to_timestamp



# Exceptions
class EclipseError(Exception):
    """Base class for eclipse geometry errors"""

class DegenerateEclipseError(EclipseError):
    """No visible eclipse within the search window"""

class NonConvergenceError(EclipseError):
    """Bracket-and-refine search failed where a transition was expected"""

class ComputationCancelled(EclipseError):
    """Computation superseded by a newer request"""



class EclipseType(Enum):
    TOTAL   = "Total"
    ANNULAR = "Annular"
    PARTIAL = "Partial"
    HYBRID  = "Hybrid"

    @property
    def central(self) -> bool:
        return self is not EclipseType.PARTIAL


class FieldQuantity(Enum):
    MAGNITUDE            = "magnitude"
    IN_UMBRA             = "inUmbra"
    MAGNITUDE_DERIVATIVE = "magnitudeTimeDerivative"


class SearchState(Enum):
    NOT_STARTED      = "not started"
    SEARCHING_COARSE = "searching coarse"
    REFINING         = "refining"
    FOUND            = "found"
    ABSENT           = "absent"



# Dataclasses
@dataclass(frozen=True)
class EclipseDescriptor:
    """One solar eclipse event"""
    name: str                   # e.g. "2019-12-26 (Annular)"
    jt_max: float               # time of greatest eclipse, JD (TT)
    type: EclipseType           # total/annular/partial/hybrid
    delta_t: float = None       # TT - UT1 in s, None = from astropy

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class GeoPoint:
    """Geodetic (WGS84) position"""
    lat: float                  # latitude in degrees
    lon: float                  # longitude in degrees
    height: float = 0.0         # height in meters

    def normalized(self) -> "GeoPoint":
        """Same point with longitude in [-180, 180)"""
        return replace(self, lon=normalize_lon(self.lon))

    def to_efi(self, height: float=None) -> np.ndarray:
        """Earth-centered Earth-fixed position in km"""
        return geodetic_to_efi(self.lat, self.lon, self.height if height is None else height)

    def __str__(self) -> str:
        return f"lat={self.lat:8.4f} lon={self.lon:9.4f}"


# Line segment between two geographic points
Segment = tuple[GeoPoint, GeoPoint]
# Threshold level (or time for max lines) -> segments
ContourSet = dict[float, list[Segment]]


@dataclass(frozen=True)
class Limits:
    """Spatial and temporal box containing the visible eclipse"""
    lat_min: float
    lat_max: float
    lon_min: float              # may be > 180 for boxes across the date line
    lon_max: float
    jt_min: float               # JD (TT)
    jt_max: float
    spatial_res: float          # degrees
    temporal_res: float         # days

    def widened(self, deg: float=0.0, days: float=0.0) -> "Limits":
        """New Limits extended by deg in lat/lon and days in time"""
        lon_min = self.lon_min - deg
        lon_max = self.lon_max + deg
        if lon_max - lon_min > 360:
            lon_max = lon_min + 360
        return replace(self,
                       lat_min = max(-90.0, self.lat_min - deg),
                       lat_max = min( 90.0, self.lat_max + deg),
                       lon_min = lon_min,
                       lon_max = lon_max,
                       jt_min  = self.jt_min - days,
                       jt_max  = self.jt_max + days)

    def with_times(self, jt_min: float=None, jt_max: float=None, temporal_res: float=None) -> "Limits":
        """New Limits with replaced time range and/or temporal resolution"""
        return replace(self,
                       jt_min       = self.jt_min if jt_min is None else jt_min,
                       jt_max       = self.jt_max if jt_max is None else jt_max,
                       temporal_res = self.temporal_res if temporal_res is None else temporal_res)

    def contains_time(self, jt: float) -> bool:
        return self.jt_min <= jt <= self.jt_max


@dataclass(frozen=True)
class BesselianState:
    """Besselian elements at one instant, lengths in Earth equatorial radii, angles in degrees"""
    jt: float                   # JD (TT)
    x: float                    # shadow axis in the fundamental plane
    y: float
    z: float                    # Moon's distance from the fundamental plane
    d: float                    # declination of the shadow axis
    mu: float                   # Greenwich hour angle of the shadow axis
    l1: float                   # penumbra radius in the fundamental plane
    l2: float                   # umbra radius, < 0 for total
    tan_f1: float               # penumbral cone angle
    tan_f2: float               # umbral cone angle
    x_p: float = 0.0            # derivatives per hour
    y_p: float = 0.0
    d_p: float = 0.0
    mu_p: float = 0.0

    @property
    def gamma(self) -> float:
        """Distance of the shadow axis from Earth's center"""
        return math.hypot(self.x, self.y)


@dataclass(frozen=True)
class Precision:
    """Step sizes and tolerances of the bracket-and-refine searches (days)"""
    coarse_step: float = 2 / 1440           # 2 min
    penumbra_tolerance: float = 1 / 86400   # 1 s
    umbra_tolerance: float = 0.1 / 86400    # 0.1 s


@dataclass(frozen=True)
class Tier:
    """Resolution tier of the progressive refinement"""
    grid_size: float            # degrees
    time_step: float            # days

    def __str__(self) -> str:
        return f"{self.grid_size}deg/{self.time_step * 1440:.0f}min"


DEFAULT_TIERS = (Tier(4.0,  4 / 1440),
                 Tier(2.0,  2 / 1440),
                 Tier(1.0,  1 / 1440),
                 Tier(0.5,  1 / 1440),
                 Tier(0.25, 1 / 1440))


@dataclass(frozen=True)
class Settings:
    """All tunable parameters of one computation, passed explicitly"""
    precision: Precision = field(default_factory=Precision)
    limits_res: float = 2.0                         # degrees
    limits_step: float = 5 / 1440                   # days
    limits_window: float = 5 / 24                   # search +/- around maximum
    limits_margin_deg: float = 5.0
    limits_margin_days: float = 20 / 1440
    contour_margin_deg: float = 5.0                 # widening for magnitude contours
    contour_margin_days: float = 10 / 1440
    mag_levels: tuple[float, ...] = (0.001, 0.2, 0.4, 0.6, 0.8)
    umbra_levels: tuple[float, ...] = (0.99,)
    derivative_epsilon: float = 1 / 1440            # magnitude time derivative step
    max_line_interval: float = 30 / 1440            # derivative contours every 30 min
    max_line_margin: float = 60 / 1440              # P1 - 60 min .. P4 + 60 min
    max_line_res: float = 1.0                       # degrees
    tiers: tuple[Tier, ...] = DEFAULT_TIERS


@dataclass
class Contact:
    """One contact point, jt/point are None if ABSENT"""
    label: str                  # P1..P4
    state: SearchState = SearchState.NOT_STARTED
    jt: float = None
    point: GeoPoint = None

    @property
    def found(self) -> bool:
        return self.state is SearchState.FOUND

    def __str__(self) -> str:
        if not self.found:
            return f"{self.label}  {self.state.value}"
        return f"{self.label}  JT={self.jt:.6f}  {self.point}"


@dataclass
class ContactPointSet:
    """P1 first penumbra, P2 first umbra, P3 last umbra, P4 last penumbra"""
    first_penumbra: Contact
    first_umbra: Contact
    last_umbra: Contact
    last_penumbra: Contact

    def __iter__(self):
        return iter((self.first_penumbra, self.first_umbra, self.last_umbra, self.last_penumbra))

    @property
    def central(self) -> bool:
        return self.first_umbra.found and self.last_umbra.found


@dataclass(frozen=True)
class CentralLinePoint:
    """Point of the central line"""
    jt: float                   # JD (TT)
    point: GeoPoint
    ratio: float                # moon/sun size ratio = magnitude on central line
    duration: float             # duration of central phase in s
    width: float                # width of path in km


@dataclass
class UmbralEnvelope:
    """North and south edge of the umbral path"""
    north: list[GeoPoint] = field(default_factory=list)
    south: list[GeoPoint] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.north) or bool(self.south)

    def segments(self) -> list[Segment]:
        """Disjoint 2-point segments along both edges plus closing segments at the ends"""
        segs = []
        for line in (self.north, self.south):
            segs.extend(zip(line[:-1], line[1:]))
        if self.north and self.south:
            segs.append((self.north[0], self.south[0]))
            segs.append((self.north[-1], self.south[-1]))
        return segs


@dataclass
class UmbraExtent:
    """Umbra at one instant, boolean grid over a local window"""
    grid: np.ndarray            # (lat rows, lon columns), 1.0 inside umbra
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float
    lat_step: float
    lon_step: float

    @property
    def empty(self) -> bool:
        return not np.any(self.grid)


@dataclass
class RiseSetCurves:
    """Penumbral limits at sunrise/sunset, two branches each"""
    rise: tuple[list[GeoPoint], list[GeoPoint]] = field(default_factory=lambda: ([], []))
    set: tuple[list[GeoPoint], list[GeoPoint]] = field(default_factory=lambda: ([], []))

    def segments(self) -> list[Segment]:
        segs = []
        for side in (self.rise, self.set):
            for branch in side:
                segs.extend(zip(branch[:-1], branch[1:]))
            # Close the lobe at both ends
            a, b = side
            if a and b:
                segs.append((a[0], b[0]))
                segs.append((a[-1], b[-1]))
        return segs


@dataclass
class MaxRiseSetCurves:
    """Maximum eclipse at sunrise/sunset, ordered by latitude"""
    rise: list[GeoPoint] = field(default_factory=list)
    set: list[GeoPoint] = field(default_factory=list)


@dataclass(frozen=True)
class Caption:
    """Label point"""
    lat: float
    lon: float
    text: str



@dataclass
class StateBundle:
    """All results of one computation tier"""
    eclipse: EclipseDescriptor
    title: str
    grid_size: float
    time_step: float
    limits: Limits
    contours: ContourSet                        # maximum magnitude levels
    umbra_contours: ContourSet
    der_contours: ContourSet = field(default_factory=dict)      # maximum lines, JT -> segments
    contacts: ContactPointSet = None
    central_line: list[CentralLinePoint] = field(default_factory=list)
    umbral_envelope: UmbralEnvelope = field(default_factory=UmbralEnvelope)
    rise_set: RiseSetCurves = field(default_factory=RiseSetCurves)
    max_rise_set: MaxRiseSetCurves = field(default_factory=MaxRiseSetCurves)
    mag_captions: list[Caption] = field(default_factory=list)
    max_captions: list[Caption] = field(default_factory=list)
    generation: int = 0

    def to_dict(self, height: float=10000.0) -> dict:
        """
        Plain nested lists/records for renderers and JSON export,
        geographic coordinates in degrees, Cartesian points in km
        """
        def contour_list(contours: ContourSet, key: str) -> list[dict]:
            return [ { key: level,
                       "segments": [ [ [a.lat, a.lon], [b.lat, b.lon] ] for a, b in segs ],
                       "points": segments_to_efi(segs, height) }
                     for level, segs in contours.items() ]

        def contact(c: Contact) -> dict:
            return { "label": c.label,
                     "state": c.state.value,
                     "jt": c.jt,
                     "timestamp": jt_to_timestamp(c.jt) if c.found else None,
                     "lat": c.point.lat if c.found else None,
                     "lon": c.point.lon if c.found else None,
                     "point": c.point.to_efi(height).tolist() if c.found else None }

        def captions(lst: list[Caption]) -> list[dict]:
            return [ { "lat": c.lat, "lon": c.lon, "text": c.text } for c in lst ]

        return {
            "eclipse": { "name": self.eclipse.name, "jt_max": self.eclipse.jt_max,
                         "type": self.eclipse.type.value, "delta_t": self.eclipse.delta_t },
            "title": self.title,
            "grid_size": self.grid_size,
            "time_step": self.time_step,
            "limits": asdict(self.limits),
            "contours": contour_list(self.contours, "level"),
            "umbra_contours": contour_list(self.umbra_contours, "level"),
            "der_contours": contour_list(self.der_contours, "jt"),
            "contacts": [ contact(c) for c in self.contacts ] if self.contacts else [],
            "central_line": [ { "jt": c.jt, "lat": c.point.lat, "lon": c.point.lon,
                                "ratio": c.ratio, "duration": c.duration, "width": c.width }
                              for c in self.central_line ],
            "central_line_points": points_to_efi([ c.point for c in self.central_line ], height),
            "umbral_envelope": { "north": [ [p.lat, p.lon] for p in self.umbral_envelope.north ],
                                 "south": [ [p.lat, p.lon] for p in self.umbral_envelope.south ],
                                 "points": segments_to_efi(self.umbral_envelope.segments(), height) },
            "rise_set": { "rise": [ [ [p.lat, p.lon] for p in b ] for b in self.rise_set.rise ],
                          "set":  [ [ [p.lat, p.lon] for p in b ] for b in self.rise_set.set ],
                          "points": segments_to_efi(self.rise_set.segments(), height) },
            "max_rise_set": { "rise": [ [p.lat, p.lon] for p in self.max_rise_set.rise ],
                              "set":  [ [p.lat, p.lon] for p in self.max_rise_set.set ],
                              "points": segments_to_efi(
                                  list(zip(self.max_rise_set.rise[:-1], self.max_rise_set.rise[1:])) +
                                  list(zip(self.max_rise_set.set[:-1],  self.max_rise_set.set[1:])), height) },
            "mag_captions": captions(self.mag_captions),
            "max_captions": captions(self.max_captions),
            "generation": self.generation,
        }



def normalize_lon(lon: float) -> float:
    """Wrap longitude to [-180, 180)"""
    return (lon + 180.0) % 360.0 - 180.0


def points_to_efi(points: list[GeoPoint], height: float=0.0) -> list[list[float]]:
    """Earth-fixed Cartesian positions (km) of points"""
    if not points:
        return []
    xyz = geodetic_to_efi([ p.lat for p in points ], [ p.lon for p in points ], height)
    return xyz.tolist()


def segments_to_efi(segments: list[Segment], height: float=0.0) -> list[list[float]]:
    """Flat list of Earth-fixed Cartesian positions (km), 2 per segment"""
    return points_to_efi([ p for seg in segments for p in seg ], height)
