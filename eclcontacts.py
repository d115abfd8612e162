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
#       First/last contact of penumbra and umbra with the Earth,
#       coarse scan and root_scalar() refinement

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclcontacts"
DESCRIPTION = "Contact points P1..P4 of a solar eclipse"

from typing import Callable

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# SciPy
from scipy import optimize

# Local modules
from verbose import verbose, warning, error
from eclclasses import EclipseDescriptor, Limits, Precision, BesselianState
from eclclasses import Contact, ContactPointSet, SearchState, NonConvergenceError
from eclephem import Ephemeris, ephemeris_for
import eclbessel



class ContactSearch:
    """
    Bracket-and-refine search for one contact

    The condition holds where func(bessel) <= 0. First contacts scan
    forward from limits.jt_min, last contacts backward from limits.jt_max.
    """

    def __init__(self, label: str, ephem: Ephemeris, func: Callable[[BesselianState], float],
                 forward: bool, tolerance: float, penumbra: bool):
        self.ephem     = ephem
        self.func      = func
        self.forward   = forward
        self.tolerance = tolerance
        self.contact   = Contact(label)
        self.penumbra  = penumbra


    def f(self, jt: float) -> float:
        return self.func(self.ephem.bessel(jt))


    def holds(self, jt: float) -> bool:
        return self.f(jt) <= 0


    def coarse(self, limits: Limits, step: float) -> tuple[float, float] | None:
        """
        Scan with coarse steps, return bracket (outside, inside) or None
        """
        self.contact.state = SearchState.SEARCHING_COARSE
        n = int(np.ceil((limits.jt_max - limits.jt_min) / step)) + 1
        if self.forward:
            jts = limits.jt_min + step * np.arange(n)
        else:
            jts = limits.jt_max - step * np.arange(n)

        previous = None
        for jt in jts:
            if self.holds(jt):
                return previous, float(jt)
            previous = float(jt)
        return None


    def refine(self, outside: float, inside: float) -> float:
        """
        Refine the time of the transition inside the bracket,
        return the side where the condition holds
        """
        self.contact.state = SearchState.REFINING
        lo, hi = min(outside, inside), max(outside, inside)
        try:
            sol = optimize.root_scalar(self.f, bracket=[lo, hi], method="brentq", xtol=self.tolerance)
        except ValueError as e:
            raise NonConvergenceError(f"{self.contact.label}: bracket [{lo}, {hi}] invalid: {e}") from e
        if not sol.converged:
            raise NonConvergenceError(f"{self.contact.label}: refinement failed, {sol.flag}")
        jt = sol.root
        ic(self.contact.label, sol)

        # Make sure to end up on the side where the condition holds
        step = self.tolerance if self.forward else -self.tolerance
        for _ in range(10):
            if self.holds(jt):
                break
            jt += step
        jt = min(max(jt, lo), hi)
        if not self.holds(jt):
            jt = inside
        return float(jt)


    def run(self, limits: Limits, precision: Precision) -> Contact:
        bracket = self.coarse(limits, precision.coarse_step)
        if bracket is None:
            self.contact.state = SearchState.ABSENT
            verbose(f"{self.contact.label} absent")
            return self.contact

        outside, inside = bracket
        if outside is None:
            # Condition already true at the start of the scan
            raise NonConvergenceError(f"{self.contact.label}: no transition inside limits")

        jt = self.refine(outside, inside)
        b  = self.ephem.bessel(jt)
        self.contact.jt    = jt
        self.contact.point = eclbessel.contact_point(b, penumbra=self.penumbra)
        self.contact.state = SearchState.FOUND
        verbose(f"{self.contact}")
        return self.contact



def compute_contacts(eclipse: EclipseDescriptor, limits: Limits, precision: Precision=None) -> ContactPointSet:
    """
    Compute first and last contacts of the umbra and the penumbra

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    limits : Limits
        Time limits for the search
    precision : Precision, optional
        Coarse step and refinement tolerances, by default Precision()

    Returns
    -------
    ContactPointSet
        P1..P4, umbral contacts ABSENT for partial eclipses

    Raises
    ------
    NonConvergenceError
        Refinement failed or penumbral contact missing
    """
    precision = precision or Precision()
    ephem = ephemeris_for(eclipse)

    searches = (
        ContactSearch("P1", ephem, eclbessel.penumbra_function, True,  precision.penumbra_tolerance, True),
        ContactSearch("P2", ephem, eclbessel.umbra_function,    True,  precision.umbra_tolerance,    False),
        ContactSearch("P3", ephem, eclbessel.umbra_function,    False, precision.umbra_tolerance,    False),
        ContactSearch("P4", ephem, eclbessel.penumbra_function, False, precision.penumbra_tolerance, True),
    )
    p1, p2, p3, p4 = [ s.run(limits, precision) for s in searches ]

    for c in (p1, p4):
        if not c.found:
            raise NonConvergenceError(f"eclipse {eclipse}: penumbral contact {c.label} not found inside limits")

    return ContactPointSet(first_penumbra=p1, first_umbra=p2, last_umbra=p3, last_penumbra=p4)
