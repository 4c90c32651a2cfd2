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
Filename-based layer classification
===================================

Gerber and Excellon files carry almost no reliable information about which physical layer they describe, so we guess
from the file name. A :py:class:`Classifier` asks an ordered list of strategies, and the first strategy that returns a
definite answer (:py:class:`~.roles.RoleFound` or :py:class:`~.roles.Ignored`) wins. By default, the EDA tool naming
conventions from gerbonara are consulted first, and our own :py:data:`~.layer_rules.HEURISTIC_RULES` are used as a
fallback.
"""

import re
from pathlib import PureWindowsPath

from gerbonara.layer_rules import MATCH_RULES

from .roles import LayerRole, RoleFound, Ignored, NOT_FOUND
from .layer_rules import HEURISTIC_RULES, CONVENTION_ROLES, CONVENTION_CORRECTIONS, NON_FILENAME_KEYS


def basename(filename):
    """ Return the base name of the given path, accepting both ``/`` and ``\\`` as separators since zip files created
    on windows sometimes contain the latter. """
    return PureWindowsPath(str(filename)).name


class ConventionLookup:
    """ Look up file names in a table of per-EDA-tool naming conventions. The table maps generator names to dicts of
    ``{layer name: regex}``, in the format of :py:obj:`gerbonara.layer_rules.MATCH_RULES`. Generators and rules are
    tried in table order, and each regex must match the whole file name.

    :param rules: Convention table to use. Defaults to gerbonara's built-in table.
    :param roles: :py:obj:`dict` mapping the table's layer names to :py:class:`~.roles.LayerRole` instances, or to
                  :py:obj:`None` for layers that are recognized but not rendered.
    :param corrections: Per-generator ``{layer name: regex}`` entries merged over ``rules``. Defaults to
                        :py:data:`~.layer_rules.CONVENTION_CORRECTIONS` when ``rules`` is not given.
    """

    name = 'convention'

    def __init__(self, rules=None, roles=None, corrections=None):
        if rules is None:
            rules = MATCH_RULES
            corrections = CONVENTION_CORRECTIONS if corrections is None else corrections
        corrections = corrections or {}
        roles = CONVENTION_ROLES if roles is None else roles

        self._rules = []
        for generator, layers in rules.items():
            layers = {**layers, **corrections.get(generator, {})}
            for layer, regex in layers.items():
                if layer in NON_FILENAME_KEYS or not isinstance(regex, str):
                    continue
                self._rules.append((generator, layer, re.compile(regex, re.IGNORECASE)))
        self._roles = roles

    def lookup(self, name):
        for generator, layer, regex in self._rules:
            if not regex.fullmatch(name):
                continue

            if layer not in self._roles:
                # e.g. "autoguess": the generator is known for ambiguous names, so let the heuristics have a go.
                return NOT_FOUND

            if (role := self._roles[layer]) is None:
                return Ignored(f'{generator} {layer or "ignored file"}')
            return RoleFound(role)

        return NOT_FOUND

    __call__ = lookup

    def __repr__(self):
        return f'<ConventionLookup with {len(self._rules)} rules>'


class HeuristicRules:
    """ Match file names against a declarative ``{role: [regex, ...]}`` table. Roles are tried in table order, and a
    regex matches if it is found anywhere in the file name. """

    name = 'heuristic'

    def __init__(self, rules=None):
        rules = HEURISTIC_RULES if rules is None else rules
        self._rules = [(role, [re.compile(pattern) for pattern in patterns]) for role, patterns in rules.items()]

    def lookup(self, name):
        for role, patterns in self._rules:
            if any(pattern.search(name) for pattern in patterns):
                return RoleFound(role)
        return NOT_FOUND

    __call__ = lookup

    def __repr__(self):
        return f'<HeuristicRules for {len(self._rules)} roles>'


class OverrideRules:
    """ User-supplied ``{regex: layer}`` mapping, e.g. loaded from a JSON file. Each regex must match the whole
    lowercased file name, and each layer must either be a role name such as ``"top.copper"`` or ``"bottom
    soldermask"``, or the string ``"ignore"`` to drop matching files. Invalid role names raise a :py:exc:`ValueError`
    here, not during classification. """

    name = 'override'

    def __init__(self, overrides):
        self._rules = []
        for expr, layer in overrides.items():
            if not isinstance(layer, str):
                raise ValueError(f'Invalid layer {layer!r} for {expr!r}, must be a string')

            if layer == 'ignore':
                result = Ignored(f'override {expr!r}')
            else:
                result = RoleFound(LayerRole.parse(layer))
            self._rules.append((re.compile(expr, re.IGNORECASE), result))

    def lookup(self, name):
        for regex, result in self._rules:
            if regex.fullmatch(name):
                return result
        return NOT_FOUND

    __call__ = lookup

    def __repr__(self):
        return f'<OverrideRules with {len(self._rules)} rules>'


class Classifier:
    """ Ordered chain of classification strategies. A strategy is any callable taking a lowercased base name and
    returning :py:class:`~.roles.RoleFound`, :py:class:`~.roles.NotFound` or :py:class:`~.roles.Ignored`. """

    def __init__(self, strategies=None):
        if strategies is None:
            strategies = [ConventionLookup(), HeuristicRules()]
        self.strategies = list(strategies)

    @classmethod
    def from_options(kls, overrides=None, builtin_rules=True):
        """ Build a classifier that consults ``overrides`` (see :py:class:`OverrideRules`) first, followed by the
        built-in naming conventions and heuristics unless ``builtin_rules`` is :py:obj:`False`. """
        strategies = []
        if overrides:
            strategies.append(OverrideRules(overrides))
        if builtin_rules:
            strategies += [ConventionLookup(), HeuristicRules()]
        return kls(strategies)

    def explain(self, filename):
        """ Classify the given file name and return a ``(strategy, result)`` tuple, where ``strategy`` is the strategy
        that decided, or :py:obj:`None` when no strategy had an opinion. """
        name = basename(filename).lower()
        for strategy in self.strategies:
            match (result := strategy(name)):
                case RoleFound() | Ignored():
                    return strategy, result
        return None, NOT_FOUND

    def classify(self, filename):
        """ Return the :py:class:`~.roles.LayerRole` of the given file name, or :py:obj:`None` if it is not
        recognized. Never raises. """
        match self.explain(filename)[1]:
            case RoleFound(role=role):
                return role
            case _:
                return None

    __call__ = classify


default_classifier = Classifier()

def classify(filename):
    """ Classify a file name using the default strategies. See :py:meth:`Classifier.classify`. """
    return default_classifier.classify(filename)
