#!/usr/bin/env python

# Copyright 2025-2026 Martin Junius
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
#       Computation pipeline for one resolution tier, background computer
#       with progressive refinement, request generations and cancellation

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclstate"
DESCRIPTION = "Eclipse geometry state for resolution tiers"

import threading
import concurrent.futures
from dataclasses import replace
from typing import Callable, Iterable, Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error, message
from astroutils import jt_to_timestamp
from eclclasses import EclipseDescriptor, Limits, Settings, Tier, StateBundle, ContourSet
from eclclasses import ContactPointSet, ComputationCancelled, EclipseError
from eclephem import Ephemeris, ephemeris_for
from eclsampler import grid_axes, max_magnitude_grid, derivative_grid
from eclcontour import extract
from ecllimits import compute_limits
from eclcontacts import compute_contacts
from ecllines import compute_central_line, compute_umbral_envelope
from eclriseset import compute_rise_set, compute_max_rise_set
from eclcaptions import create_mag_captions



def _check(cancelled: Callable[[], bool] | None, stage: str) -> None:
    if cancelled and cancelled():
        raise ComputationCancelled(f"computation cancelled before {stage}")



def create_contours(ephem: Ephemeris, limits: Limits, grid_size: float, time_step: float,
                    settings: Settings, cancelled: Callable[[], bool]=None) -> Tuple[ContourSet, ContourSet]:
    """
    Create contours of maximum magnitude and umbra over the whole eclipse

    Parameters
    ----------
    ephem : Ephemeris
        Ephemeris of the eclipse
    limits : Limits
        Limits of the visible eclipse, widened by the contour margins
    grid_size : float
        Spatial resolution in degrees
    time_step : float
        Temporal resolution in days
    settings : Settings
        Levels and margins

    Returns
    -------
    Tuple[ContourSet, ContourSet]
        magnitude contours, umbra contours
    """
    box = limits.widened(settings.contour_margin_deg, settings.contour_margin_days)
    lat_axis, lon_axis = grid_axes(box.lat_min, box.lat_max, box.lon_min, box.lon_max, grid_size)
    mag, umbra = max_magnitude_grid(ephem, lat_axis, lon_axis, box.jt_min, box.jt_max, time_step, cancelled)
    _check(cancelled, "contour extraction")

    args = (float(lat_axis[0]), float(lat_axis[-1]), float(lon_axis[0]), float(lon_axis[-1]), grid_size)
    contours       = extract(*args, mag,   settings.mag_levels)
    umbra_contours = extract(*args, umbra, settings.umbra_levels)
    return contours, umbra_contours



def max_line_times(limits: Limits, interval: float, delta_t: float) -> np.ndarray:
    """
    Times of the maximum lines, whole multiples of interval in UT, from the
    start of the hour after limits.jt_min to the start of the hour before
    the hour of limits.jt_max
    """
    dt    = delta_t / 86400
    first = (np.floor((limits.jt_min - dt) * 24) + 1) / 24
    last  = (np.floor((limits.jt_max - dt) * 24) - 1) / 24
    if last < first:
        return np.array([])
    n = int(np.floor((last - first) / interval + 1e-6)) + 1
    return first + interval * np.arange(n) + dt


def create_der_contours(ephem: Ephemeris, limits: Limits, settings: Settings,
                        cancelled: Callable[[], bool]=None) -> ContourSet:
    """
    Create maximum lines, zero contours of the magnitude time derivative

    Parameters
    ----------
    ephem : Ephemeris
        Ephemeris of the eclipse
    limits : Limits
        Spatial box and time range P1 - margin .. P4 + margin, spatial resolution
        of the derivative grids
    settings : Settings
        Margins and interval

    Returns
    -------
    ContourSet
        Time (JT) -> segments
    """
    box = limits.widened(settings.contour_margin_deg)
    res = limits.spatial_res
    lat_axis, lon_axis = grid_axes(box.lat_min, box.lat_max, box.lon_min, box.lon_max, res)

    der_contours = {}
    for jt in max_line_times(limits, settings.max_line_interval, ephem.delta_t):
        _check(cancelled, "maximum lines")
        der = derivative_grid(ephem, lat_axis, lon_axis, jt, settings.derivative_epsilon)
        contours = extract(float(lat_axis[0]), float(lat_axis[-1]), float(lon_axis[0]), float(lon_axis[-1]),
                           res, der, [0.0])
        der_contours[float(jt)] = contours[0.0]
    return der_contours



def create_state(eclipse: EclipseDescriptor, grid_size: float, time_step: float,
                 settings: Settings=None, cancelled: Callable[[], bool]=None) -> StateBundle:
    """
    Compute all eclipse geometry for one resolution tier

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    grid_size : float
        Spatial resolution in degrees for the magnitude contours
    time_step : float
        Temporal resolution in days
    settings : Settings, optional
        Parameters, by default Settings()
    cancelled : Callable[[], bool], optional
        Polled between the stages, returns True to stop

    Returns
    -------
    StateBundle
        All results

    Raises
    ------
    ComputationCancelled
        cancelled() returned True
    DegenerateEclipseError
        No visible eclipse
    NonConvergenceError
        Contact search failed
    """
    settings = settings or Settings()
    verbose(f"computation {eclipse} {grid_size} deg / {time_step * 1440:.0f} min started")
    ephem = ephemeris_for(eclipse)
    title = f"{jt_to_timestamp(eclipse.jt_max)} ({eclipse.type.value})"

    _check(cancelled, "limits")
    with verbose.timer("limits"):
        limits = compute_limits(eclipse, settings.limits_res, settings.limits_step, settings)

    _check(cancelled, "contours")
    with verbose.timer("contours"):
        contours, umbra_contours = create_contours(ephem, limits, grid_size, time_step, settings, cancelled)

    limits = limits.with_times(temporal_res=1/1440)

    _check(cancelled, "central line")
    with verbose.timer("central line"):
        central_line = compute_central_line(eclipse, limits, time_step)
    _check(cancelled, "contact points")
    with verbose.timer("contact points"):
        contacts = compute_contacts(eclipse, limits, settings.precision)
    _check(cancelled, "rise/set curves")
    with verbose.timer("rise/set curves"):
        rise_set = compute_rise_set(eclipse, limits, contacts, time_step)

    _check(cancelled, "umbral envelope")
    with verbose.timer("umbral envelope"):
        envelope = compute_umbral_envelope(eclipse, limits, contacts, time_step)

    _check(cancelled, "maximum lines")
    der_limits = replace(limits,
                         jt_min      = contacts.first_penumbra.jt - settings.max_line_margin,
                         jt_max      = contacts.last_penumbra.jt  + settings.max_line_margin,
                         spatial_res = settings.max_line_res)
    with verbose.timer("maximum lines"):
        der_contours = create_der_contours(ephem, der_limits, settings, cancelled)
    mag_captions, max_captions = create_mag_captions(der_contours, ephem)

    _check(cancelled, "maximum at rise/set")
    with verbose.timer("maximum at rise/set"):
        max_rise_set = compute_max_rise_set(eclipse, limits, time_step)

    verbose(f"computation {eclipse} {grid_size} deg / {time_step * 1440:.0f} min done")
    return StateBundle(eclipse         = eclipse,
                       title           = title,
                       grid_size       = grid_size,
                       time_step       = time_step,
                       limits          = limits,
                       contours        = contours,
                       umbra_contours  = umbra_contours,
                       der_contours    = der_contours,
                       contacts        = contacts,
                       central_line    = central_line,
                       umbral_envelope = envelope,
                       rise_set        = rise_set,
                       max_rise_set    = max_rise_set,
                       mag_captions    = mag_captions,
                       max_captions    = max_captions)



class EclipseComputer:
    """
    Background computation of eclipse states, coarse tiers first

    Every submit() starts a new generation: queued work of older
    generations is cancelled, running work stops at the next stage
    boundary, and bundles of older generations are dropped.
    """

    def __init__(self, settings: Settings=None, max_workers: int=1, memoize: bool=True):
        self.settings  = settings or Settings()
        self.memoize   = memoize
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers,
                                                               thread_name_prefix="eclipse")
        self._lock       = threading.Lock()
        self._generation = 0
        self._cancel     = threading.Event()
        self._futures    = []
        self._memo       = {}
        self.latest: StateBundle = None


    @property
    def generation(self) -> int:
        return self._generation


    def submit(self, eclipse: EclipseDescriptor, tiers: Iterable[Tier]=None,
               on_bundle: Callable[[StateBundle], None]=None) -> int:
        """
        Start computation of all tiers for eclipse

        Parameters
        ----------
        eclipse : EclipseDescriptor
            The eclipse
        tiers : Iterable[Tier], optional
            Resolution tiers, by default settings.tiers
        on_bundle : Callable[[StateBundle], None], optional
            Called from the worker thread with each current bundle

        Returns
        -------
        int
            Generation of this request
        """
        tiers = tuple(tiers or self.settings.tiers)
        with self._lock:
            # Stop previous generation
            self._cancel.set()
            for f in self._futures:
                f.cancel()
            # Keep cached bundles of this eclipse only
            self._memo = { k: b for k, b in self._memo.items() if k[0] == eclipse }
            self._generation += 1
            generation   = self._generation
            self._cancel = threading.Event()
            cancel       = self._cancel
            self._futures = [ self._executor.submit(self._run, generation, cancel, eclipse, tier, on_bundle)
                              for tier in tiers ]
        verbose(f"generation {generation}: {eclipse}, tiers {', '.join(str(t) for t in tiers)}")
        return generation


    def _compute(self, eclipse: EclipseDescriptor, tier: Tier, cancel: threading.Event) -> StateBundle:
        key = (eclipse, tier.grid_size, tier.time_step)
        with self._lock:
            bundle = self._memo.get(key) if self.memoize else None
        if bundle is None:
            bundle = create_state(eclipse, tier.grid_size, tier.time_step, self.settings, cancel.is_set)
            if self.memoize:
                with self._lock:
                    self._memo[key] = bundle
        return bundle


    def _run(self, generation: int, cancel: threading.Event, eclipse: EclipseDescriptor,
             tier: Tier, on_bundle: Callable[[StateBundle], None]) -> StateBundle | None:
        try:
            bundle = self._compute(eclipse, tier, cancel)
        except ComputationCancelled as e:
            verbose(f"generation {generation} {tier}: {e}")
            return None
        except EclipseError as e:
            warning(f"generation {generation} {tier}: {e}")
            raise
        bundle = replace(bundle, generation=generation)
        if self._deliver(bundle, on_bundle):
            return bundle
        return None


    def _deliver(self, bundle: StateBundle, on_bundle: Callable[[StateBundle], None]=None) -> bool:
        """
        Publish bundle if it belongs to the current generation, drop it otherwise
        """
        with self._lock:
            if bundle.generation != self._generation:
                stale = True
            else:
                stale = False
                self.latest = bundle
        if stale:
            verbose(f"dropping stale bundle of generation {bundle.generation} ({bundle.grid_size} deg)")
            return False
        if on_bundle:
            on_bundle(bundle)
        return True


    def wait(self, timeout: float=None) -> StateBundle | None:
        """
        Wait for the current generation, at most timeout seconds, return the latest bundle
        """
        with self._lock:
            futures = list(self._futures)
        done, not_done = concurrent.futures.wait(futures, timeout=timeout)
        if not_done:
            verbose(f"{len(not_done)} tier(s) still running after {timeout} s")
        for f in done:
            if not f.cancelled() and f.exception() is not None:
                raise f.exception()
        return self.latest


    def cancel(self) -> None:
        with self._lock:
            self._cancel.set()
            for f in self._futures:
                f.cancel()


    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True, cancel_futures=True)


    def __enter__(self) -> "EclipseComputer":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
