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

import io
import threading
from zipfile import ZipFile

import pytest

from ..render import RenderedSides
from ..errors import RenderFailed

# 10mm x 10mm board, coordinates in 4.6 mm format
COPPER_GERBER = '''G04 stackview test copper*
%FSLAX46Y46*%
%MOMM*%
%LPD*%
%ADD10C,0.250000*%
%ADD11R,1.500000X1.500000*%
D10*
X1000000Y1000000D02*
X9000000Y9000000D01*
D11*
X5000000Y5000000D03*
M02*
'''

OUTLINE_GERBER = '''G04 stackview test outline*
%FSLAX46Y46*%
%MOMM*%
%ADD10C,0.100000*%
D10*
X0Y0D02*
X10000000Y0D01*
X10000000Y10000000D01*
X0Y10000000D01*
X0Y0D01*
M02*
'''

# Selects a tool that was never defined
BROKEN_DRILL = '''M48
%
T5
M30
'''


def make_zip(files):
    """ Return the bytes of a zip file containing the given ``{name: text}`` files. """
    data = io.BytesIO()
    with ZipFile(data, 'w') as f:
        for name, content in files.items():
            f.writestr(name, content)
    return data.getvalue()


@pytest.fixture
def zipfile_path(tmp_path):
    """ Write a zip file with the given ``{name: text}`` files and return its path. """
    def write(files, name='board.zip'):
        path = tmp_path / name
        path.write_bytes(make_zip(files))
        return path
    return write


class FakeRenderer:
    """ Renderer stand-in that records its calls and returns SVGs listing the received layers. """

    def __init__(self, fail=None):
        self.calls = []
        self.fail = fail
        self._lock = threading.Lock()

    def render(self, board_name, layers):
        with self._lock:
            self.calls.append((board_name, list(layers)))

        if self.fail:
            raise RenderFailed(self.fail)

        names = ' '.join(f'{layer.role}={layer.filename}' for layer in layers)
        return RenderedSides(f'<svg id="top" data-board="{board_name}">{names}</svg>',
                             f'<svg id="bottom" data-board="{board_name}">{names}</svg>')
