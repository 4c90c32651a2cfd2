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
import os
from zipfile import ZipFile

from quart import Quart, request, Response
from werkzeug.exceptions import InternalServerError

from .stackup import render_archive, board_name_for
from .errors import StackupError, ExtractionFailed


def create_app(config=None):
    """ Create the preview web app. Configuration keys:

    * ``STACKVIEW_WORKDIR``: Directory for per-request working directories (default: system temp dir, or the
      ``STACKVIEW_WORKDIR`` environment variable)
    * ``STACKVIEW_DUPLICATES``: Duplicate layer policy, ``'last'``, ``'first'`` or ``'error'``
    * ``STACKVIEW_RENDERER``: Renderer instance (default: :py:class:`~.render.GerbonaraRenderer`)
    * ``MAX_CONTENT_LENGTH``: Upload size limit in bytes
    """
    app = Quart(__name__)
    app.config.update(
            STACKVIEW_WORKDIR=os.environ.get('STACKVIEW_WORKDIR') or None,
            STACKVIEW_DUPLICATES='last',
            STACKVIEW_RENDERER=None,
            MAX_CONTENT_LENGTH=64*1024*1024)
    app.config.update(config or {})

    async def render_upload():
        files = await request.files
        if (upload := files.get('gerber')) is None:
            return None

        return await render_archive(upload.read(),
                                    workdir=app.config['STACKVIEW_WORKDIR'],
                                    board_name=board_name_for(upload.filename or ''),
                                    renderer=app.config['STACKVIEW_RENDERER'],
                                    duplicates=app.config['STACKVIEW_DUPLICATES'])

    def missing_upload():
        return Response('Missing "gerber" file upload', status=400, mimetype='text/plain')

    @app.route('/', methods=['POST'])
    async def render_zip():
        if (board := await render_upload()) is None:
            return missing_upload()

        data = io.BytesIO()
        with ZipFile(data, 'w') as f:
            f.writestr('top.svg', board.top_svg)
            f.writestr('bottom.svg', board.bottom_svg)
        return Response(data.getvalue(), mimetype='application/zip')

    @app.route('/<any(top, bottom):side>.svg', methods=['POST'])
    async def render_side(side):
        if (board := await render_upload()) is None:
            return missing_upload()

        svg = board.top_svg if side == 'top' else board.bottom_svg
        return Response(svg, mimetype='image/svg+xml')

    @app.after_request
    async def allow_any_origin(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        return response

    @app.errorhandler(StackupError)
    async def stackup_error(e):
        app.logger.warning('Render request failed: %s', e)
        status = 400 if isinstance(e, ExtractionFailed) else 422
        return Response(e.user_message, status=status, mimetype='text/plain')

    @app.errorhandler(InternalServerError)
    async def internal_error(e):
        return Response('Gerber render failed', status=500, mimetype='text/plain')

    return app


if __name__ == '__main__':
    create_app().run(port=int(os.environ.get('PORT', 3000)))
