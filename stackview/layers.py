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

import os
import warnings
from pathlib import Path

from .roles import LayerInput, REQUIRED_ROLES, STACK_ORDER
from .classifier import classify as default_classify, basename
from .errors import NoValidLayers, MissingRequiredLayers, AmbiguousLayers, SkippedFileWarning, DuplicateLayerWarning


DUPLICATE_POLICIES = ('last', 'first', 'error')


def walk(root):
    """ Return the paths of all regular files below ``root``, recursing into subdirectories. Entries are sorted by name
    on every level, so the result is stable between runs. Errors while listing a directory are not suppressed.

    :param root: :py:class:`~pathlib.Path` or :py:obj:`str` of the directory to walk
    :rtype: list of :py:class:`~pathlib.Path`
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f'{root} is not a directory')

    out = []
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            out.extend(walk(entry.path))
        elif entry.is_file(follow_symlinks=False):
            out.append(Path(entry.path).absolute())
    return out


def read_text(path):
    # Gerber and Excellon are ASCII. We only forward the content, so replace whatever garbage some tools put into
    # their comments instead of failing the whole board on it.
    return Path(path).read_text(encoding='utf-8', errors='replace')


class LayerSet:
    """ :py:class:`LayerSet` holds at most one :py:class:`~.roles.LayerInput` per :py:class:`~.roles.LayerRole`.
    Iterating a :py:class:`LayerSet` yields its layers in :py:data:`~.roles.STACK_ORDER`, independent of the order in
    which they were added.

    :param duplicates: What to do when a second file for an already present role is added. One of ``'last'`` (replace
                       the existing entry, the default), ``'first'`` (keep the existing entry) or ``'error'`` (raise
                       :py:exc:`~.errors.AmbiguousLayers`). ``'last'`` and ``'first'`` emit a
                       :py:class:`~.errors.DuplicateLayerWarning`.
    """

    def __init__(self, layers=(), duplicates='last'):
        if duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f'Invalid duplicate policy {duplicates!r}, must be one of {", ".join(DUPLICATE_POLICIES)}')
        self.duplicates = duplicates
        self._layers = {}
        for layer in layers:
            self.add(layer)

    def add(self, layer):
        if (old := self._layers.get(layer.role)) is not None:
            match self.duplicates:
                case 'error':
                    raise AmbiguousLayers(layer.role, [old.filename, layer.filename])
                case 'first':
                    warnings.warn(f'Multiple files found for {layer.role} layer, using {old.filename} and ignoring {layer.filename}',
                                  DuplicateLayerWarning)
                    return
                case 'last':
                    warnings.warn(f'Multiple files found for {layer.role} layer, using {layer.filename} instead of {old.filename}',
                                  DuplicateLayerWarning)
        self._layers[layer.role] = layer

    def missing(self, required=REQUIRED_ROLES):
        """ Return the list of roles from ``required`` that are not present in this set. """
        return [role for role in required if role not in self._layers]

    def validate(self, required=REQUIRED_ROLES):
        """ Raise :py:exc:`~.errors.NoValidLayers` if this set is empty, or :py:exc:`~.errors.MissingRequiredLayers` if
        any of ``required`` is missing. """
        if not self._layers:
            raise NoValidLayers()

        if (missing := self.missing(required)):
            raise MissingRequiredLayers(missing)

    @property
    def roles(self):
        return [layer.role for layer in self]

    def get(self, role, default=None):
        return self._layers.get(role, default)

    def __getitem__(self, role):
        return self._layers[role]

    def __contains__(self, role):
        return role in self._layers

    def __iter__(self):
        for role in STACK_ORDER:
            if role in self._layers:
                yield self._layers[role]

        # Roles outside the standard stack only turn up with custom classifiers
        for role, layer in self._layers.items():
            if role not in STACK_ORDER:
                yield layer

    def __len__(self):
        return len(self._layers)

    def format_layer_map(self):
        lines = []
        for role in STACK_ORDER:
            layer = self._layers.get(role)
            lines.append(f'  {str(role)+":":<20} {layer.filename if layer else "<not found>"}')
        return '\n'.join(lines)

    def __str__(self):
        return f'<LayerSet [{", ".join(str(layer.role) for layer in self)}]>'

    def __repr__(self):
        return str(self)


def assemble(paths, read=read_text, classify=default_classify, duplicates='last', required=REQUIRED_ROLES):
    """ Classify and read the given files, and assemble the result into a validated :py:class:`LayerSet`.

    Files that cannot be classified are skipped with a :py:class:`~.errors.SkippedFileWarning`. Files are only read
    once they have been classified.

    :param paths: Iterable of file paths
    :param read: Callable returning the text content of a path
    :param classify: Callable mapping a file name to a :py:class:`~.roles.LayerRole`, or to :py:obj:`None` for
                     unrecognized files
    :param duplicates: Duplicate role policy, see :py:class:`LayerSet`
    :param required: Roles that must be present
    :raises NoValidLayers: if no file at all could be classified
    :raises MissingRequiredLayers: if any of ``required`` is missing
    :rtype: :py:class:`LayerSet`
    """
    layers = LayerSet(duplicates=duplicates)

    for path in paths:
        filename = basename(path)
        role = classify(filename)
        if role is None:
            warnings.warn(f'Skipped unrecognized layer: {filename}', SkippedFileWarning)
            continue

        layers.add(LayerInput(filename, role, read(path)))

    layers.validate(required)
    return layers
