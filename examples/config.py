# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

# pylint: disable=missing-module-docstring
#
# Copy to ~/.config/suspend2hibernate/config.py. Values given on the command line take precedence.

# How long to suspend before hibernating to disk, in seconds
SUSPEND_DURATION = 3 * 60 * 60

# Where every session appends its log
LOG_FILE = "/tmp/suspend2hibernate.log"
