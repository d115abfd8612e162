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
#       Eclipse map command line tool: compute state for one or all
#       resolution tiers, list contacts and central line, JSON/CSV export,
#       quick-look plot

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclmap"
DESCRIPTION = "Compute solar eclipse maps"

import sys
import argparse

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# Local modules
from verbose import verbose, warning, error, message
from astroutils import jt_to_ut_string
from eclclasses import EclipseError, EclipseType, StateBundle, Tier
from eclconfig import config, settings_from_config
from eclephem import KNOWN_ECLIPSES, get_eclipse, eclipse_from_time, ephemeris_for
from eclstate import create_state, EclipseComputer
from eclexport import write_json, write_csv, TABLES
from eclplot import plot_state



def list_eclipses() -> None:
    for name, eclipse in KNOWN_ECLIPSES.items():
        message(f"{name}  {jt_to_ut_string(eclipse.jt_max, eclipse.delta_t or 0.0)} UT  {eclipse.type.value}")


def list_contacts(state: StateBundle) -> None:
    dt = ephemeris_for(state.eclipse).delta_t
    message(f"Contacts {state.title}")
    for c in state.contacts:
        if c.found:
            message(f"  {c.label}  {jt_to_ut_string(c.jt, dt)} UT  lat={c.point.lat:7.3f} lon={c.point.lon:8.3f}")
        else:
            message(f"  {c.label}  {c.state.value}")


def list_central_line(state: StateBundle) -> None:
    dt = ephemeris_for(state.eclipse).delta_t
    message(f"Central line {state.title}")
    if not state.central_line:
        message("  no central line")
    for c in state.central_line:
        message(f"  {jt_to_ut_string(c.jt, dt, 'date_hm')} UT  lat={c.point.lat:7.3f} lon={c.point.lon:8.3f}"
                f"  ratio={c.ratio:.4f}  {c.duration:5.1f} s  {c.width:5.1f} km")


def summary(state: StateBundle) -> None:
    l = state.limits
    message(f"{state.eclipse.name}: {state.grid_size} deg / {state.time_step * 1440:.0f} min, "
            f"generation {state.generation}")
    message(f"  limits lat {l.lat_min:.1f} .. {l.lat_max:.1f}, lon {l.lon_min:.1f} .. {l.lon_max:.1f}")
    message(f"  {sum(len(s) for s in state.contours.values())} magnitude segments, "
            f"{sum(len(s) for s in state.umbra_contours.values())} umbra segments, "
            f"{len(state.der_contours)} maximum lines, "
            f"{len(state.central_line)} central line points")



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = DESCRIPTION,
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("-L", "--list-eclipses", action="store_true", help="list known eclipses")
    arg.add_argument("-T", "--type", choices=[ t.name.lower() for t in EclipseType ],
                     help="eclipse type, if ECLIPSE is a time (default from geometry)")
    arg.add_argument("-t", "--tier", type=int, help="resolution tier index from config (default coarsest)")
    arg.add_argument("-g", "--grid", type=float, help="grid size in degrees")
    arg.add_argument("-s", "--step", type=float, help="time step in minutes")
    arg.add_argument("-a", "--all-tiers", action="store_true", help="compute all tiers, coarse first")
    arg.add_argument("--timeout", type=float, help="wall clock budget in s for --all-tiers")
    arg.add_argument("-c", "--contacts", action="store_true", help="list contact points")
    arg.add_argument("-C", "--central-line", action="store_true", help="list central line")
    arg.add_argument("-j", "--json", help="write state as JSON to file (- for stdout)")
    arg.add_argument("--csv", nargs=2, metavar=("TABLE", "FILE"),
                     help=f"write table ({', '.join(TABLES)}) as CSV to file (- for stdout)")
    arg.add_argument("-p", "--plot", help="write quick-look map to PNG file")
    arg.add_argument("eclipse", nargs="?", help="eclipse date from list or time of greatest eclipse (TT)")

    args = arg.parse_args()

    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path, args)
    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    if args.list_eclipses:
        list_eclipses()
        return
    if not args.eclipse:
        error("no eclipse given, use -L to list known eclipses")

    config.info()
    settings = settings_from_config()

    tier = settings.tiers[0]
    if args.tier is not None:
        if not 0 <= args.tier < len(settings.tiers):
            error(f"tier {args.tier} out of range 0..{len(settings.tiers) - 1}")
        tier = settings.tiers[args.tier]
    if args.grid or args.step:
        tier = Tier(args.grid or tier.grid_size, args.step / 1440 if args.step else tier.time_step)

    try:
        if args.type:
            eclipse = eclipse_from_time(args.eclipse, EclipseType[args.type.upper()])
        else:
            eclipse = get_eclipse(args.eclipse)
        verbose(f"eclipse {eclipse}")

        if args.all_tiers:
            with EclipseComputer(settings) as computer:
                computer.submit(eclipse, on_bundle=lambda b: verbose(f"tier {b.grid_size} deg done"))
                state = computer.wait(args.timeout)
            if state is None:
                error(f"no tier finished within {args.timeout} s")
        else:
            state = create_state(eclipse, tier.grid_size, tier.time_step, settings)
    except EclipseError as e:
        error(f"{args.eclipse}: {e}")

    summary(state)
    if args.contacts:
        list_contacts(state)
    if args.central_line:
        list_central_line(state)
    if args.json:
        write_json(state, None if args.json == "-" else args.json)
    if args.csv:
        table, file = args.csv
        if table not in TABLES:
            error(f"unknown table {table}, use one of {', '.join(TABLES)}")
        write_csv(state, table, None if file == "-" else file)
    if args.plot:
        plot_state(state, args.plot)
        message(f"map written to {args.plot}")



if __name__ == "__main__":
    main()
