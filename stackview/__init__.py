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

"""
stackview
=========

stackview turns a zip of Gerber and Excellon files into top and bottom side SVG previews of the board. Its main job is
figuring out which file describes which board layer from nothing but the file names, for which it combines the naming
conventions of common EDA tools with a set of fallback heuristics. Rendering itself is done by gerbonara.
"""

__version__ = '0.3.0'

from .roles import Side, LayerType, LayerRole, LayerInput
from .classifier import Classifier, classify
from .layers import LayerSet, walk, assemble
from .render import GerbonaraRenderer
from .stackup import render_request, render_archive
from .errors import (StackupError, ExtractionFailed, NoValidLayers, MissingRequiredLayers, AmbiguousLayers,
                     RenderFailed)
