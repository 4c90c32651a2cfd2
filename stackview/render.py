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
from pathlib import Path

from gerbonara import GerberFile, ExcellonFile, LayerStack
from gerbonara.layers import DEFAULT_COLORS

from .roles import LayerType, Side
from .errors import RenderFailed


@dataclass(frozen=True)
class RenderedSides:
    top_svg: str
    bottom_svg: str


# gerbonara names layers by (side, use) tuples
GERBONARA_USE = {
    LayerType.COPPER:       'copper',
    LayerType.SOLDERMASK:   'mask',
    LayerType.SILKSCREEN:   'silk',
}


class GerbonaraRenderer:
    """ Render a :py:class:`~.layers.LayerSet` to a pair of pretty, semi-photorealistic SVG previews using gerbonara's
    :py:meth:`~gerbonara.layers.LayerStack.to_pretty_svg`.

    Any renderer passed to :py:func:`~.stackup.render_archive` needs to provide the same :py:meth:`render` method, and
    must report bad input by raising :py:exc:`~.errors.RenderFailed`.

    :param margin: Margin around the board in mm
    :param colors: Color scheme, see :py:meth:`gerbonara.layers.LayerStack.to_pretty_svg`
    """

    def __init__(self, margin=0, colors=None):
        self.margin = margin
        self.colors = colors or DEFAULT_COLORS

    def layer_stack(self, board_name, layers):
        graphic_layers = {}
        drill_layers = []

        for layer in layers:
            filename = Path(layer.filename)
            try:
                if layer.role.type == LayerType.DRILL:
                    drill_layers.append(ExcellonFile.from_string(layer.content, filename=filename))

                elif layer.role.type == LayerType.OUTLINE:
                    graphic_layers['mechanical', 'outline'] = GerberFile.from_string(layer.content, filename=filename)

                elif layer.role.side in (Side.TOP, Side.BOTTOM) and layer.role.type in GERBONARA_USE:
                    key = str(layer.role.side), GERBONARA_USE[layer.role.type]
                    graphic_layers[key] = GerberFile.from_string(layer.content, filename=filename)

                else:
                    raise RenderFailed(f'Cannot render {layer.role} layer {layer.filename}')

            # gerbonara reports malformed input through a variety of exception types.
            except (SyntaxError, ValueError, KeyError, IndexError, TypeError, NotImplementedError) as e:
                if isinstance(e, RenderFailed):
                    raise
                raise RenderFailed(f'Error parsing {layer.filename}: {e}') from e

        return LayerStack(graphic_layers, drill_layers=drill_layers, board_name=board_name)

    def render(self, board_name, layers):
        stack = self.layer_stack(board_name, layers)
        try:
            top = stack.to_pretty_svg(side='top', margin=self.margin, colors=self.colors)
            bottom = stack.to_pretty_svg(side='bottom', margin=self.margin, colors=self.colors)
        except (ValueError, KeyError, IndexError, TypeError, ZeroDivisionError) as e:
            raise RenderFailed(f'Error rendering {board_name}: {e}') from e

        return RenderedSides(str(top), str(bottom))
