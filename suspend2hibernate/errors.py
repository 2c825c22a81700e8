# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

class Suspend2HibernateError(Exception):
    """
    Base exception used for all recoverable errors. They are logged, but a running session keeps
    going and relies on its fail-safe defaults instead.
    """
    pass

class Suspend2HibernateFatalError(Suspend2HibernateError):
    """
    This exception is, as the name implies, fatal. It is only raised before a session starts (i.e.
    invalid configuration) and makes the application exit with an error code.
    """
    pass
