# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Admin CLI for a trustledger JSON store."""
