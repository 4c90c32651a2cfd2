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
Render pipeline
===============

One render request runs extract, walk, classify/assemble, render and save strictly in this order inside its own
temporary working directory. The working directory is removed when the request ends, no matter whether it succeeded,
failed or was cancelled. Requests share no state, so any number of them can run concurrently.
"""

import io
import asyncio
import tempfile
import zipfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from .classifier import classify as default_classify
from .layers import walk, assemble, LayerSet
from .render import GerbonaraRenderer
from .errors import ExtractionFailed


DEFAULT_BOARD_NAME = 'board'


@dataclass(frozen=True)
class RenderResult:
    """ Locations of the rendered previews. Only valid until the surrounding :py:func:`render_request` block exits. """
    top_svg: Path
    bottom_svg: Path
    layers: LayerSet
    workdir: Path


@dataclass(frozen=True)
class RenderedBoard:
    top_svg: str
    bottom_svg: str
    layers: LayerSet


def extract(archive, dest):
    """ Extract a ZIP archive into ``dest``.

    :param archive: Path of the archive, its content as :py:obj:`bytes`, or a binary file-like object.
    :param dest: Existing directory to extract into.
    :raises ExtractionFailed: if the archive is corrupt, encrypted or not a ZIP file at all.
    """
    if isinstance(archive, (bytes, bytearray)):
        archive = io.BytesIO(archive)

    try:
        # ZipFile.extractall sanitizes absolute member names and ".." components for us.
        with zipfile.ZipFile(archive) as f:
            f.extractall(path=dest)
    # RuntimeError covers encrypted members, its subclass NotImplementedError unsupported compression methods.
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, RuntimeError) as e:
        raise ExtractionFailed(f'Cannot extract archive: {e}') from e


async def in_thread(func, /, *args, **kwargs):
    """ Run a blocking pipeline step in a worker thread. Cancelling the caller does not return until the thread has
    finished, so a step never touches a working directory that has already been removed. """
    step = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
    try:
        return await asyncio.shield(step)
    except asyncio.CancelledError:
        while not step.done():
            try:
                await asyncio.wait([step])
            except asyncio.CancelledError:
                continue
        if not step.cancelled():
            step.exception() # mark as retrieved, we are re-raising the cancellation instead
        raise


def board_name_for(archive):
    """ Guess a board name from the archive's file name, falling back to :py:data:`DEFAULT_BOARD_NAME`. """
    if isinstance(archive, (str, Path)):
        return Path(archive).stem or DEFAULT_BOARD_NAME

    if isinstance(name := getattr(archive, 'name', None), str) and name:
        return Path(name).stem or DEFAULT_BOARD_NAME

    return DEFAULT_BOARD_NAME


@asynccontextmanager
async def render_request(archive, workdir=None, board_name=None, renderer=None, classify=default_classify,
                         duplicates='last'):
    """ Render top and bottom previews of the board in the given ZIP archive. Use as an async context manager::

        async with render_request('board.zip') as result:
            print(result.top_svg.read_text())

    :param archive: Path, :py:obj:`bytes` or binary file-like object of the ZIP archive
    :param workdir: Directory in which the request's temporary working directory is created. Defaults to the system
                    temp directory.
    :param board_name: Board identifier passed to the renderer. Defaults to the archive's file name.
    :param renderer: Object with a ``render(board_name, layers)`` method, see
                     :py:class:`~.render.GerbonaraRenderer` (the default).
    :param classify: File name classifier, see :py:func:`~.classifier.classify`
    :param duplicates: Duplicate layer policy, see :py:class:`~.layers.LayerSet`
    :returns: :py:class:`RenderResult` with the locations of ``top.svg`` and ``bottom.svg``
    """
    renderer = renderer or GerbonaraRenderer()
    board_name = board_name or board_name_for(archive)

    if workdir is not None:
        Path(workdir).mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(prefix='stackview-', dir=workdir) as tmpdir:
        tmpdir = Path(tmpdir)
        indir, outdir = tmpdir / 'input', tmpdir / 'output'
        indir.mkdir()
        outdir.mkdir()

        await in_thread(extract, archive, indir)
        paths = await in_thread(walk, indir)
        layers = await in_thread(assemble, paths, classify=classify, duplicates=duplicates)
        sides = await in_thread(renderer.render, board_name, list(layers))

        top, bottom = outdir / 'top.svg', outdir / 'bottom.svg'
        await in_thread(top.write_text, sides.top_svg, encoding='utf-8')
        await in_thread(bottom.write_text, sides.bottom_svg, encoding='utf-8')

        yield RenderResult(top, bottom, layers, tmpdir)


async def render_archive(archive, **kwargs):
    """ Like :py:func:`render_request`, but return the SVG documents themselves as a :py:class:`RenderedBoard` after
    cleaning up the working directory. Takes the same arguments. """
    async with render_request(archive, **kwargs) as result:
        return RenderedBoard(
                await in_thread(result.top_svg.read_text, encoding='utf-8'),
                await in_thread(result.bottom_svg.read_text, encoding='utf-8'),
                result.layers)


def render_archive_sync(archive, **kwargs):
    """ Blocking wrapper around :py:func:`render_archive` for use outside of an event loop. """
    return asyncio.run(render_archive(archive, **kwargs))
