#!/usr/bin/env python

# Copyright 2023-2026 Martin Junius
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
# Version 0.1 / 2023-12-18
#       First version of JSONConfig module
# Version 0.2 / 2024-01-23
#       Rewritten for multiple config files, global config object
# Version 0.3 / 2024-06-19
#       Search also in .config
# Version 0.5 / 2024-08-28
#       New method .info(), verbose output of config filename and top-level keys
# Version 0.6 / 2025-06-29
#       Method .get() now supports nested keys, e.g. config.get("main", "sub", "setting")
# Version 0.7 / 2026-10-19
#       Built-in defaults merged below the config file, attribute access
#       (config.coarse_step), search in ~/.config/eclipse-geometry,
#       Windows Documents folder hack removed
#
#       Usage:  from jsonconfig import JSONConfig
#               config = JSONConfig(CONFIGFILE, defaults={...}, warn=False, err=False)
#               config.get("key", "subkey")
#               config.key

import os
import sys
import argparse
import json

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# Local modules
from verbose import verbose, warning, error



VERSION = "0.7 / 2026-10-19"
AUTHOR  = "Martin Junius"
NAME    = "JSONConfig"


CONFIG     = ".config"
CONFIGDIR  = "eclipse-geometry"



class JSONConfig:
    """ JSONConfig base class """

    def __init__(self, file: str, defaults: dict=None, warn: bool=True, err: bool=True):
        ic("config init", file)
        self.configfile = None
        self.config = dict(defaults) if defaults else {}
        self.read_config(file, warn, err)


    def __getattr__(self, name: str):
        # Only called if regular attribute lookup fails
        if name.startswith("_") or name in ("config", "configfile"):
            raise AttributeError(name)
        if name in self.config:
            return self.config[name]
        raise AttributeError(f"config has no key {name!r}")


    def read_config(self, file: str, warn: bool=True, err: bool=True) -> None:
        ic(file)
        file1 = self.search_config(file)
        if file1:
            self.configfile = file1
            data = self.read_json(file1)
            # Merge with existing config, file values win
            self.config = self.config | data
        elif err:
            error(f"config {file} not found")
        elif warn:
            warning(f"config {file} not found")


    def info(self) -> None:
        verbose(f"config file {self.configfile or '(built-in defaults)'}")
        verbose("config keys:", " ".join( [k for k in self.config.keys() if not k.startswith("#")] ))


    def search_config(self, file: str) -> str | None:
        # If full path use as is
        if os.path.isfile(file):
            return file

        # Search config file in current directory, user config, LOCALAPPDATA, APPDATA
        searchpath = []

        path = os.path.join(os.path.curdir, CONFIG)
        if os.path.isdir(path):
            searchpath.append(path)

        path = os.path.join(os.path.curdir, CONFIG, CONFIGDIR)
        if os.path.isdir(path):
            searchpath.append(path)

        path = os.path.join(os.path.expanduser("~"), CONFIG, CONFIGDIR)
        if os.path.isdir(path):
            searchpath.append(path)

        for env in ("LOCALAPPDATA", "APPDATA"):
            appdata = os.environ.get(env)
            if appdata:
                path = os.path.join(appdata, CONFIGDIR)
                if os.path.isdir(path):
                    searchpath.append(path)
            else:
                ic(f"environment {env} not set!")

        # Search for config file in searchpath list
        for path in searchpath:
            ic(path)
            file1 = os.path.join(path, file)
            if os.path.isfile(file1):
                ic(file1)
                return file1

        return None


    def read_json(self, file: str) -> dict:
        with open(file, 'r', encoding="utf-8") as f:
            return json.load(f)


    def write_json(self, file: str) -> None:
        with open(file, 'w', encoding="utf-8") as f:
            json.dump(self.config, f, indent = 2)


    def get(self, *keys):
        cf = self.config
        for k in keys:
            cf = cf.get(k)
            if cf is None:
                return None
        return cf


    def get_keys(self):
        return self.config.keys()



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = "Test for module",
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="debug messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("-c", "--config", help="read CONFIG file")

    args = arg.parse_args()

    verbose.set_prog(NAME)
    if args.verbose:
        verbose.enable()
    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path)

    config = JSONConfig(args.config or "eclipse-config.json", warn=True, err=False)
    config.info()
    print("JSON config keys =", ", ".join(config.get_keys()))



if __name__ == "__main__":
    main()
