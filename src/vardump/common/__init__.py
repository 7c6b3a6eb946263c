# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Utilities shared by all vardump modules: logging, timestamps, JSON."""
