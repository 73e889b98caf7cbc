# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""SigV4 request authentication support for an S3-compatible gateway."""

__version__ = "0.1.0"
