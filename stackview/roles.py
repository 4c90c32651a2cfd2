#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 The stackview authors
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
#

from dataclasses import dataclass
from enum import Enum


class Side(Enum):
    TOP = 'top'
    BOTTOM = 'bottom'
    INNER = 'inner'
    ALL = 'all'

    def __str__(self):
        return self.value


class LayerType(Enum):
    COPPER = 'copper'
    SOLDERMASK = 'soldermask'
    SILKSCREEN = 'silkscreen'
    OUTLINE = 'outline'
    DRILL = 'drill'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class LayerRole:
    """ Physical function of a single Gerber or Excellon file, as a ``(side, type)`` pair. The string form is
    ``"side.type"``, e.g. ``"top.copper"``. """
    side: Side
    type: LayerType

    @classmethod
    def parse(kls, name):
        """ Parse a role from its ``"side.type"`` or ``"side type"`` string form. """
        side, _, use = name.replace(' ', '.').partition('.')
        return kls(Side(side), LayerType(use))

    @property
    def key(self):
        return self.side, self.type

    def __str__(self):
        return f'{self.side}.{self.type}'


TOP_COPPER = LayerRole(Side.TOP, LayerType.COPPER)
BOTTOM_COPPER = LayerRole(Side.BOTTOM, LayerType.COPPER)
TOP_SOLDERMASK = LayerRole(Side.TOP, LayerType.SOLDERMASK)
BOTTOM_SOLDERMASK = LayerRole(Side.BOTTOM, LayerType.SOLDERMASK)
TOP_SILKSCREEN = LayerRole(Side.TOP, LayerType.SILKSCREEN)
BOTTOM_SILKSCREEN = LayerRole(Side.BOTTOM, LayerType.SILKSCREEN)
OUTLINE = LayerRole(Side.ALL, LayerType.OUTLINE)
DRILL = LayerRole(Side.INNER, LayerType.DRILL)

#: Roles that must be present before a board can be rendered.
REQUIRED_ROLES = (TOP_COPPER, BOTTOM_COPPER)

#: Order in which layers are handed to the renderer, bottom of the visual stack first.
STACK_ORDER = (
        OUTLINE,
        TOP_COPPER,
        TOP_SOLDERMASK,
        TOP_SILKSCREEN,
        BOTTOM_COPPER,
        BOTTOM_SOLDERMASK,
        BOTTOM_SILKSCREEN,
        DRILL,
        )


@dataclass(frozen=True)
class LayerInput:
    """ One classified input file. ``content`` is the raw file text and is never interpreted by stackview itself. """
    filename: str
    role: LayerRole
    content: str = ''

    def __repr__(self):
        return f'<LayerInput {self.role} {self.filename!r} ({len(self.content)} chars)>'


# Classification strategy results. A strategy either found a role, has no opinion on the file, or positively knows the
# file is something we don't render (e.g. a paste layer or a netlist), in which case later strategies are not consulted.

@dataclass(frozen=True)
class RoleFound:
    role: LayerRole


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Ignored:
    reason: str = ''


NOT_FOUND = NotFound()
