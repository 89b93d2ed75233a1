# Copyright Red Hat
#
# xattrdiff/__init__.py - Extended attribute differ package initialisation
#
# This file is part of the xattrdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Xattrdiff top-level package.
"""
from ._xattrdiff import *  # noqa: F401, F403
from ._xattrdiff import __all__  # noqa: F401

__version__ = "0.1.0"
