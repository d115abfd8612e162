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
# Version 0.1 / 2026-01-02
#       Based on verbose 1.4, using logging for output
# Version 0.2 / 2026-10-19
#       Derived from verboselog 0.1, replaces the print-based verbose module
#       for the eclipse modules,
#       new .timer() context manager for computation stage timings,
#       thread name in log format (background tier computation)
#
#       Usage:  from verbose import message, verbose, warning, error
#               message(print-like-args)
#               verbose(print-like-args)
#               warning(print-like-args)
#               error(print-like-args)
#               .print_lines(line(s), ...)
#               .timer(label)           with verbose.timer("contours"): ...
#               .enable(flag=True)
#               .disable()
#               .enabled
#               .set_prog(name)         global for all objects
#               .set_errno(errno)       relevant only for error()

import argparse
import sys
import time
import logging
from contextlib import contextmanager

VERSION = "0.2 / 2026-10-19"
AUTHOR  = "Martin Junius"
NAME    = "verbose"



class Verbose:
    """
    Class for verbose-style objects using logging
    """
    progname: str = ""              # global program name
    errno: int    = 1               # exit code, 1 for generic errors
    logger: logging.Logger = None   # global logger object

    def __init__(self, flag: bool, level: int=logging.INFO, abort: bool=False):
        """
        Create verbose-style object

        :param flag: enable output flag
        :type flag: bool
        :param level: logging level, defaults to logging.INFO
        :type level: int, optional
        :param abort: abort after output flag, defaults to False
        :type abort: bool, optional
        """
        self.enabled = flag
        self.level = level
        self.abort = abort


    def __call__(self, *args, **kwargs):
        """
        Make verbose-style object callable, all args are joined like print()
        """
        if not self.enabled:
            return

        # Make sure that logger exists
        if not Verbose.logger:
            self.set_prog(Verbose.progname)

        msg = " ".join([ str(a) for a in args ])
        Verbose.logger.log(self.level, msg, **kwargs)
        if self.abort:
            self._exit()


    def print_lines(self, *args, **kwargs) -> None:
        """
        Print multi-line string representation of object(s)
        """
        for arg in args:
            for line in str(arg).splitlines():
                self.__call__(line, **kwargs)


    @contextmanager
    def timer(self, label: str):
        """
        Log wall-clock duration of the enclosed block

        :param label: name of the computation stage
        :type label: str
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.__call__(f"{label} took {(time.perf_counter() - start) * 1000:.0f} ms")


    def enable(self, flag: bool=True):
        """
        Enable (default) or disable (flag=False) output

        :param flag: enable output flag, defaults to True
        :type flag: bool, optional
        """
        self.enabled = flag

    def disable(self):
        """
        Disable output
        """
        self.enabled = False

    def set_prog(self, name: str=""):
        """
        Set program name prefix

        :param name: program name
        :type name: str
        """
        if name:
            format = "%(asctime)s %(name)s[%(threadName)s]:%(levelname)s: %(message)s"
        else:
            format = "%(asctime)s [%(threadName)s] %(levelname)s: %(message)s"
        logging.basicConfig(encoding='utf-8', level=logging.DEBUG,
                            format=format, datefmt='%Y-%m-%d %H:%M:%S')
        Verbose.logger = logging.getLogger(name)
        Verbose.progname = name


    def set_errno(self, errno: int):
        """
        Set global errno for abort exit()

        :param errno: error code
        :type errno: int
        """
        Verbose.errno = errno

    def _exit(self):
        """
        Internal, exit program
        """
        Verbose.logger.error(f"exiting ({Verbose.errno})")
        sys.exit(Verbose.errno)


message = Verbose(True, logging.INFO)
verbose = Verbose(False, logging.INFO)
warning = Verbose(True, logging.WARNING)
error   = Verbose(True, logging.ERROR, True)



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = "Test script for verbose module",
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")

    args = arg.parse_args()

    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    message("Just", "a", "message at the beginning")
    warning("Just a first warning ;-)")
    with verbose.timer("sleeping"):
        time.sleep(0.1)
    verbose.print_lines("abc", "line1\nline2")
    error.set_errno(99)
    error("Error test", "for Verbose module")



if __name__ == "__main__":
    main()
