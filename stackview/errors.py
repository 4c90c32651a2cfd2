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


class StackupError(ValueError):
    """ Base class of all errors that abort a single render request. :py:attr:`user_message` is safe to show to
    untrusted callers. """
    user_message = 'Gerber render failed'

    def __str__(self):
        return super().__str__() or self.user_message


class ExtractionFailed(StackupError):
    """ The uploaded archive is not a readable ZIP file """
    user_message = 'Could not extract archive. Please upload a valid ZIP file.'


class NoValidLayers(StackupError):
    """ Not a single file in the archive looks like a Gerber or drill file """
    user_message = 'No Gerber or drill files were recognized in the archive.'


class MissingRequiredLayers(StackupError):
    """ The archive lacks one of the layers required for rendering """

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(self.user_message)

    @property
    def user_message(self):
        return 'Missing required layers: ' + ', '.join(map(str, self.missing))


class AmbiguousLayers(StackupError):
    """ Two files in the archive map to the same layer """

    def __init__(self, role, filenames):
        self.role = role
        self.filenames = list(filenames)
        super().__init__(self.user_message)

    @property
    def user_message(self):
        return f'Multiple files found for {self.role} layer: {", ".join(self.filenames)}'


class RenderFailed(StackupError):
    """ The renderer rejected the assembled layers, e.g. because of malformed Gerber content """

    def __init__(self, reason):
        self.reason = str(reason)
        super().__init__(self.user_message)

    @property
    def user_message(self):
        return f'Rendering failed: {self.reason}'


class SkippedFileWarning(UserWarning):
    """ A file in the archive was not recognized as any layer and is ignored """
    pass


class DuplicateLayerWarning(UserWarning):
    """ Several files in the archive map to the same layer and only one of them is used """
    pass
