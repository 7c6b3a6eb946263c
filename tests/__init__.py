# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""vardump tests
"""

# This is only imported to ensure that the module is actually installed and the
# timeout setting in pytest.ini is active, since otherwise the HTTP tests can hang
# indefinitely if the local server stops responding.
import pytest_timeout  # noqa
