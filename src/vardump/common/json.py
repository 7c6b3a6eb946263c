# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Improved JSON serialization.
"""

import dataclasses
import json


class JsonEncoder(json.JSONEncoder):
    """Customizable JSON encoder.

    Dataclass instances are serialized as dicts of their fields. Other objects with
    an instance __dict__ are serialized as a dict of their public attributes, i.e.
    those that don't start with "_". Anything else is rejected with TypeError, the
    same as json.JSONEncoder does.
    """

    def default(self, value):
        if isinstance(value, type) or callable(value):
            return super().default(value)

        if dataclasses.is_dataclass(value):
            result = {}
            for field in dataclasses.fields(value):
                if field.name.startswith("_"):
                    continue
                try:
                    result[field.name] = getattr(value, field.name)
                except AttributeError:
                    # init=False field that was never assigned.
                    continue
            return result

        try:
            state = vars(value)
        except TypeError:
            return super().default(value)
        else:
            return {k: v for k, v in state.items() if not k.startswith("_")}


def dumps(value, indent=2):
    return json.dumps(value, indent=indent, cls=JsonEncoder, ensure_ascii=False)
