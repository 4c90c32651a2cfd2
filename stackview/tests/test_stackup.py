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
import asyncio
import warnings
import threading

import pytest

from ..roles import *
from ..stackup import render_request, render_archive, render_archive_sync, extract, board_name_for
from ..errors import *
from .utils import make_zip, FakeRenderer

SCENARIO = {
    'topcopper.gtl': 'top',
    'bottomcopper.gbl': 'bottom',
    'outline.gko': 'outline',
    'drill.xln': 'drill',
    }


@pytest.fixture
def workdir(tmp_path):
    return tmp_path / 'work'


def test_scenario(zipfile_path, renderer, workdir):
    board = render_archive_sync(zipfile_path(SCENARIO), workdir=workdir, renderer=renderer)

    assert len(renderer.calls) == 1
    board_name, layers = renderer.calls[0]
    assert board_name == 'board'
    assert [layer.role for layer in layers] == [OUTLINE, TOP_COPPER, BOTTOM_COPPER, DRILL]
    assert {layer.filename: layer.content for layer in layers} == SCENARIO

    assert board.top_svg.startswith('<svg id="top" data-board="board">')
    assert board.bottom_svg.startswith('<svg id="bottom" data-board="board">')
    assert 'top.copper=topcopper.gtl' in board.top_svg
    assert board.layers.roles == [OUTLINE, TOP_COPPER, BOTTOM_COPPER, DRILL]
    assert list(workdir.iterdir()) == []


def test_render_request_files(zipfile_path, renderer, workdir):
    async def run():
        async with render_request(zipfile_path(SCENARIO), workdir=workdir, renderer=renderer) as result:
            assert result.top_svg.name == 'top.svg'
            assert result.bottom_svg.name == 'bottom.svg'
            assert result.top_svg.read_text().startswith('<svg id="top"')
            assert result.bottom_svg.read_text().startswith('<svg id="bottom"')
            assert result.workdir.parent == workdir
            return result.workdir

    tmpdir = asyncio.run(run())
    assert not tmpdir.exists()
    assert list(workdir.iterdir()) == []


def test_board_name(zipfile_path, renderer):
    render_archive_sync(zipfile_path(SCENARIO, name='my-board.zip'), renderer=renderer)
    render_archive_sync(make_zip(SCENARIO), renderer=renderer)
    render_archive_sync(make_zip(SCENARIO), renderer=renderer, board_name='explicit')
    assert [name for name, _layers in renderer.calls] == ['my-board', 'board', 'explicit']


def test_board_name_for(tmp_path):
    assert board_name_for(tmp_path / 'foo.zip') == 'foo'
    assert board_name_for('bar.zip') == 'bar'
    assert board_name_for('') == 'board'
    assert board_name_for(b'PK') == 'board'
    assert board_name_for(io.BytesIO()) == 'board'


def test_bytes_and_file_input(renderer):
    data = make_zip(SCENARIO)
    a = render_archive_sync(data, renderer=renderer)
    b = render_archive_sync(io.BytesIO(data), renderer=renderer)
    assert a.top_svg == b.top_svg


def test_idempotent(zipfile_path, renderer):
    path = zipfile_path(SCENARIO)
    a = render_archive_sync(path, renderer=renderer)
    b = render_archive_sync(path, renderer=renderer)
    assert (a.top_svg, a.bottom_svg) == (b.top_svg, b.bottom_svg)


def test_nested_archive(renderer):
    data = make_zip({
        'project/gerbers/rev-b/final/' + name: content for name, content in SCENARIO.items()})
    board = render_archive_sync(data, renderer=renderer)
    assert len(board.layers) == 4


def test_extract(tmp_path):
    extract(make_zip({'a/b.gtl': 'x'}), tmp_path)
    assert (tmp_path / 'a' / 'b.gtl').read_text() == 'x'


def test_extract_sanitizes_member_names(tmp_path):
    dest = tmp_path / 'dest'
    dest.mkdir()
    extract(make_zip({'../evil.gtl': 'x', '/abs.gbl': 'y'}), dest)
    assert not (tmp_path / 'evil.gtl').exists()
    assert sorted(p.name for p in dest.rglob('*') if p.is_file()) == ['abs.gbl', 'evil.gtl']


@pytest.mark.parametrize('data', [b'', b'this is not a zip file', make_zip(SCENARIO)[:40]])
def test_extraction_failed(data, renderer, workdir):
    with pytest.raises(ExtractionFailed):
        render_archive_sync(data, renderer=renderer, workdir=workdir)
    assert renderer.calls == []
    assert list(workdir.iterdir()) == []


def test_cleanup_on_missing_layers(renderer, workdir):
    with pytest.raises(MissingRequiredLayers):
        render_archive_sync(make_zip({'board.gko': '', 'board.gto': ''}), renderer=renderer, workdir=workdir)
    assert renderer.calls == []
    assert list(workdir.iterdir()) == []


def test_cleanup_on_no_valid_layers(renderer, workdir):
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        with pytest.raises(NoValidLayers):
            render_archive_sync(make_zip({'readme.md': ''}), renderer=renderer, workdir=workdir)
    assert list(workdir.iterdir()) == []


def test_cleanup_on_render_failure(workdir):
    renderer = FakeRenderer(fail='bad gerber')
    with pytest.raises(RenderFailed) as exc_info:
        render_archive_sync(make_zip(SCENARIO), renderer=renderer, workdir=workdir)
    assert exc_info.value.user_message == 'Rendering failed: bad gerber'
    assert list(workdir.iterdir()) == []


def test_cleanup_on_error_in_caller(renderer, workdir):
    async def run():
        async with render_request(make_zip(SCENARIO), renderer=renderer, workdir=workdir):
            raise KeyError('oops')

    with pytest.raises(KeyError):
        asyncio.run(run())
    assert list(workdir.iterdir()) == []


def test_cleanup_on_cancel(renderer, workdir):
    async def run():
        entered = asyncio.Event()

        async def request():
            async with render_request(make_zip(SCENARIO), renderer=renderer, workdir=workdir):
                entered.set()
                await asyncio.sleep(3600)

        task = asyncio.create_task(request())
        await entered.wait()
        assert len(list(workdir.iterdir())) == 1
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert list(workdir.iterdir()) == []


def test_duplicate_policy(renderer):
    data = make_zip({**SCENARIO, 'board-F_Cu.gbr': 'kicad'})

    with pytest.warns(DuplicateLayerWarning):
        board = render_archive_sync(data, renderer=renderer)
    assert board.layers[TOP_COPPER].filename == 'topcopper.gtl'

    with pytest.raises(AmbiguousLayers):
        render_archive_sync(data, renderer=renderer, duplicates='error')


def test_concurrent_requests(renderer, workdir):
    async def run():
        return await asyncio.gather(*[
            render_archive(make_zip(SCENARIO), board_name=f'board{i}', renderer=renderer, workdir=workdir)
            for i in range(8)])

    boards = asyncio.run(run())
    for i, board in enumerate(boards):
        assert f'data-board="board{i}"' in board.top_svg
    assert len(renderer.calls) == 8
    assert list(workdir.iterdir()) == []


def test_cancel_waits_for_running_step(workdir):
    started, release = threading.Event(), threading.Event()

    class SlowRenderer(FakeRenderer):
        def render(self, board_name, layers):
            started.set()
            release.wait(10)
            return super().render(board_name, layers)

    async def run():
        task = asyncio.create_task(render_archive(make_zip(SCENARIO), renderer=SlowRenderer(), workdir=workdir))
        try:
            await asyncio.to_thread(started.wait, 10)
            task.cancel()
            await asyncio.sleep(0.1)
            # the renderer thread is still busy, so the working directory must still be there
            assert not task.done()
            assert len(list(workdir.iterdir())) == 1
        finally:
            release.set()

        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert list(workdir.iterdir()) == []


def test_cancel_during_large_extraction(renderer, workdir):
    data = make_zip({f'gerbers/{i:04d}/board{i}.gtl': 'x' * 100 for i in range(3000)})

    async def run():
        task = asyncio.create_task(render_archive(data, renderer=renderer, workdir=workdir, duplicates='first'))
        await asyncio.sleep(0.05)
        task.cancel()
        try:
            await task
        except (asyncio.CancelledError, StackupError):
            pass

    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        asyncio.run(run())
    assert list(workdir.iterdir()) == []
