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
#       Global config module for the eclipse modules, built-in defaults,
#       conversion to immutable Settings

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclconfig"
DESCRIPTION = "Global eclipse config module"

import sys
import argparse

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# Local modules
from verbose import verbose, warning, error, message
from jsonconfig import JSONConfig
from eclclasses import Settings, Precision, Tier



CONFIGFILE = "eclipse-config.json"

# Times in minutes/seconds in the config file, converted to days for Settings
DEFAULTS = {
    "coarse_step":         2.0,     # min
    "penumbra_tolerance":  1.0,     # s
    "umbra_tolerance":     0.1,     # s
    "limits_res":          2.0,     # deg
    "limits_step":         5.0,     # min
    "limits_window":     300.0,     # min, +/- around maximum
    "limits_margin_deg":   5.0,
    "limits_margin_min":  20.0,
    "contour_margin_deg":  5.0,
    "contour_margin_min": 10.0,
    "mag_levels":   [ 0.001, 0.2, 0.4, 0.6, 0.8 ],
    "umbra_levels": [ 0.99 ],
    "derivative_step":     1.0,     # min
    "max_line_interval":  30.0,     # min
    "max_line_margin":    60.0,     # min
    "max_line_res":        1.0,     # deg
    "tiers": [ [ 4.0, 4.0 ], [ 2.0, 2.0 ], [ 1.0, 1.0 ], [ 0.5, 1.0 ], [ 0.25, 1.0 ] ],    # deg, min
}

config = JSONConfig(CONFIGFILE, defaults=DEFAULTS, warn=False, err=False)



def settings_from_config(cfg: JSONConfig=None) -> Settings:
    """
    Convert config values to immutable Settings for the computation

    Parameters
    ----------
    cfg : JSONConfig, optional
        Config object, by default the global config

    Returns
    -------
    Settings
        Settings with all times in days
    """
    cfg = cfg or config
    minute = 1 / 1440
    second = 1 / 86400

    precision = Precision(coarse_step        = cfg.coarse_step * minute,
                          penumbra_tolerance = cfg.penumbra_tolerance * second,
                          umbra_tolerance    = cfg.umbra_tolerance * second)
    tiers = tuple( Tier(float(grid), float(step) * minute) for grid, step in cfg.tiers )

    settings = Settings(precision          = precision,
                        limits_res         = float(cfg.limits_res),
                        limits_step        = cfg.limits_step * minute,
                        limits_window      = cfg.limits_window * minute,
                        limits_margin_deg  = float(cfg.limits_margin_deg),
                        limits_margin_days = cfg.limits_margin_min * minute,
                        contour_margin_deg = float(cfg.contour_margin_deg),
                        contour_margin_days= cfg.contour_margin_min * minute,
                        mag_levels         = tuple( float(l) for l in cfg.mag_levels ),
                        umbra_levels       = tuple( float(l) for l in cfg.umbra_levels ),
                        derivative_epsilon = cfg.derivative_step * minute,
                        max_line_interval  = cfg.max_line_interval * minute,
                        max_line_margin    = cfg.max_line_margin * minute,
                        max_line_res       = float(cfg.max_line_res),
                        tiers              = tiers)
    ic(settings)
    return settings



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = DESCRIPTION,
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("-w", "--write", help="write config with defaults to WRITE")

    args = arg.parse_args()

    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path, args)
    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    config.info()
    for k in config.get_keys():
        verbose(f"{k:22s} : {config.get(k)}")
    if args.write:
        config.write_json(args.write)
        message(f"config written to {args.write}")
    message(settings_from_config())



if __name__ == "__main__":
    main()
