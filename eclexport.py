#!/usr/bin/env python

# Copyright 2024-2026 Martin Junius
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
#       JSON export of eclipse states, locale aware CSV tables
#       for contacts, central line, umbral
#       envelope and contours
#
#       Usage:  from eclexport import write_json, write_csv
#               write_json(state, "state.json")
#               write_csv(state, "central", "central.csv")     file=None uses stdout

VERSION = "0.1 / 2026-10-19"
AUTHOR  = "Martin Junius"
NAME    = "eclexport"

import csv
import json
import locale
import sys
from typing import TextIO, Any

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# Local modules
from verbose import verbose, warning, error
from astroutils import jt_to_ut_string
from eclclasses import StateBundle
from eclephem import ephemeris_for


DEFAULT_FLOAT_FORMAT = "%.6f"
TABLES = ("contacts", "central", "envelope", "contours")



class CSVTable:
    """
    CSV table with header, floats formatted according to locale
    """

    def __init__(self, fields: list[str], float_fmt: str=DEFAULT_FLOAT_FORMAT) -> None:
        self.fields    = fields
        self.rows      = []
        self.float_fmt = float_fmt


    def add_row(self, data: list) -> None:
        self.rows.append(data)


    def _fmt(self, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, float):
            return locale.format_string(self.float_fmt, v)
        return str(v)


    def _write(self, f: TextIO) -> None:
        if locale.localeconv()['decimal_point'] == ",":
            # Use ; as the separator and quote all fields for easy import in "German" Excel
            writer = csv.writer(f, dialect="excel", delimiter=";", quoting=csv.QUOTE_ALL)
        else:
            writer = csv.writer(f, dialect="excel")
        writer.writerow(self.fields)
        for row in self.rows:
            writer.writerow([ self._fmt(v) for v in row ])


    def write(self, file: str=None) -> None:
        """
        Write CSV to file or stdout

        Parameters
        ----------
        file : str, optional
            Filename, by default None = write to stdout
        """
        if file:
            with open(file, 'w', newline='', encoding="utf-8") as f:
                self._write(f)
        else:
            self._write(sys.stdout)



def contacts_table(state: StateBundle) -> CSVTable:
    dt = ephemeris_for(state.eclipse).delta_t
    table = CSVTable(["contact", "state", "jt", "time_ut", "lat", "lon"])
    if state.contacts:
        for c in state.contacts:
            if c.found:
                table.add_row([ c.label, c.state.value, c.jt, jt_to_ut_string(c.jt, dt), c.point.lat, c.point.lon ])
            else:
                table.add_row([ c.label, c.state.value, None, None, None, None ])
    return table


def central_table(state: StateBundle) -> CSVTable:
    dt = ephemeris_for(state.eclipse).delta_t
    table = CSVTable(["jt", "time_ut", "lat", "lon", "ratio", "duration_s", "width_km"])
    for c in state.central_line:
        table.add_row([ c.jt, jt_to_ut_string(c.jt, dt), c.point.lat, c.point.lon, c.ratio, c.duration, c.width ])
    return table


def envelope_table(state: StateBundle) -> CSVTable:
    table = CSVTable(["edge", "index", "lat", "lon"])
    for edge, points in (("north", state.umbral_envelope.north), ("south", state.umbral_envelope.south)):
        for i, p in enumerate(points):
            table.add_row([ edge, i, p.lat, p.lon ])
    return table


def contours_table(state: StateBundle) -> CSVTable:
    table = CSVTable(["kind", "level", "segment", "lat1", "lon1", "lat2", "lon2"])
    for kind, contours in (("magnitude", state.contours), ("umbra", state.umbra_contours),
                           ("maximum", state.der_contours)):
        for level, segs in contours.items():
            for i, (a, b) in enumerate(segs):
                table.add_row([ kind, float(level), i, a.lat, a.lon, b.lat, b.lon ])
    return table


def write_csv(state: StateBundle, table: str, file: str=None, set_locale: bool=True) -> None:
    """
    Write one table of the state as CSV

    Parameters
    ----------
    state : StateBundle
        Computed eclipse state
    table : str
        One of "contacts", "central", "envelope", "contours"
    file : str, optional
        Filename, by default None = write to stdout
    set_locale : bool, optional
        Use the default system locale for number formatting, by default True
    """
    if set_locale:
        locale.setlocale(locale.LC_ALL, "")
    tables = { "contacts": contacts_table, "central": central_table,
               "envelope": envelope_table, "contours": contours_table }
    if table not in tables:
        raise ValueError(f"unknown table {table!r}, expected one of {', '.join(TABLES)}")
    tables[table](state).write(file)
    verbose(f"{table} table written to {file or 'stdout'}")



def write_json(state: StateBundle, file: str=None, indent: int=None) -> None:
    """
    Write state as JSON (StateBundle.to_dict()) to file or stdout
    """
    data = state.to_dict()
    if file:
        with open(file, 'w', encoding="utf-8") as f:
            json.dump(data, f, indent=indent)
    else:
        json.dump(data, sys.stdout, indent=indent)
    verbose(f"state written to {file or 'stdout'}")
