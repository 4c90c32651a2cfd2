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

from .roles import *

# Fallback filename patterns, used for files that none of the per-EDA-tool naming conventions know about. Patterns are
# searched (not fullmatched) in the lowercased base name. Rules are tried top to bottom and the first match wins, so
# the order of this dict is significant: a name like "top_mask.gbr" that slipped past the convention table ends up as
# top copper.
HEURISTIC_RULES = {
    TOP_COPPER: [
        r'f[._]cu',         # kicad
        r'top',
        r'gtl',             # altium/protel
        r'\.cmp',           # eagle
        r'\.top$',          # orcad, target
        ],
    BOTTOM_COPPER: [
        r'b[._]cu',
        r'bottom',
        r'gbl',
        r'\.sol',
        r'\.bot$',
        ],
    TOP_SOLDERMASK: [
        r'f[._]mask',
        r'gts',
        r'stc',
        r'\.topmask',       # geda
        ],
    BOTTOM_SOLDERMASK: [
        r'b[._]mask',
        r'gbs',
        r'sts',
        r'\.bottommask',
        ],
    TOP_SILKSCREEN: [
        r'f[._]silks',
        r'gto',
        r'plc',
        r'\.topsilk',
        ],
    BOTTOM_SILKSCREEN: [
        r'b[._]silks',
        r'gbo',
        r'pls',
        r'\.bottomsilk',
        ],
    OUTLINE: [
        r'edge[._]cuts',
        r'outline',
        r'gm1',
        r'gko',
        r'.oln',            # any character before oln/out, so e.g. "board-cutout.gbr" matches too
        r'.out',
        ],
    DRILL: [
        r'\.drl',
        r'\.drd',
        r'\.xln',
        r'\.cnc',
        r'\.txt',
        r'\.exc',
        ],
}

# Maps the layer names used by gerbonara's naming convention table (gerbonara.layer_rules.MATCH_RULES) to our roles.
# Names mapping to None are layers the convention table recognizes, but which we don't render. Names not listed here
# (such as "autoguess") carry no opinion and fall through to the heuristic rules.
CONVENTION_ROLES = {
    'top copper':           TOP_COPPER,
    'bottom copper':        BOTTOM_COPPER,
    'top mask':             TOP_SOLDERMASK,
    'bottom mask':          BOTTOM_SOLDERMASK,
    'top silk':             TOP_SILKSCREEN,
    'bottom silk':          BOTTOM_SILKSCREEN,
    'mechanical outline':   OUTLINE,
    'drill unknown':        DRILL,
    'drill plated':         DRILL,
    'drill nonplated':      DRILL,
    'top paste':            None,
    'bottom paste':         None,
    'inner copper':         None,
    'other netlist':        None,
    'other unknown':        None,
    'excellon params':      None,
    'gerber params':        None,
    'ipc-2581':             None,
    None:                   None,
}

# Entries of a convention table that are not filename rules.
NON_FILENAME_KEYS = {'header regex'}

# Local corrections to gerbonara's convention table, merged over the generator's rules. gerbonara's diptrace table
# lists "bottom paste" twice, so the second entry (the board outline regex) shadows the real paste rule.
CONVENTION_CORRECTIONS = {
    'diptrace': {
        'bottom paste':         r'.*_bottompaste\.\w+',
        'mechanical outline':   r'.*_boardoutline\.\w+',
        },
}
