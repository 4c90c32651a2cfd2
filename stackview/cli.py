#! /usr/bin/env python
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

import sys
import re
import json
import tempfile
import warnings
from pathlib import Path

import click

from .roles import RoleFound, Ignored
from .classifier import Classifier
from .layers import walk, assemble, DUPLICATE_POLICIES
from .render import GerbonaraRenderer
from .stackup import extract, render_archive_sync
from .errors import StackupError
from . import server
from . import __version__


def _showwarning(message, category, filename, lineno, file=None, line=None):
    if file is None:
        file = sys.stderr

    filename = Path(filename)
    install_location = Path(__file__).parent.parent
    if filename.is_relative_to(install_location):
        filename = filename.relative_to(install_location)

    print(f'{filename}:{lineno}: {message}', file=file)
warnings.showwarning = _showwarning

def _print_version(ctx, param, value):
    if value and not ctx.resilient_parsing:
        click.echo(f'Version {__version__}')
        ctx.exit()


def _classifier(input_map, use_builtin_name_rules):
    try:
        overrides = json.loads(input_map.read_bytes()) if input_map else None
        if overrides is not None and not isinstance(overrides, dict):
            raise ValueError('Input map must be a JSON object mapping regexes to layer names')
        return Classifier.from_options(overrides, builtin_rules=use_builtin_name_rules)
    # JSONDecodeError is a ValueError
    except (ValueError, re.error) as e:
        raise click.BadParameter(str(e), param_hint='--input-map')


def warnings_option(fun):
    return click.option('--warnings', 'format_warnings', default='default',
                        type=click.Choice(['default', 'ignore', 'once', 'always', 'error']),
                        help='''Show or hide warnings about skipped files, duplicate layers and file format problems
                        (default: on)''')(fun)

def input_map_options(fun):
    fun = click.option('--use-builtin-name-rules/--no-builtin-name-rules', default=True, help='''Disable built-in
                       layer name rules and use only rules given by --input-map''')(fun)
    fun = click.option('-m', '--input-map', type=click.Path(exists=True, dir_okay=False, path_type=Path),
                       help='''Extend or override layer name mapping with name map from JSON file. The JSON file must
                       contain a single JSON dict with an arbitrary number of string: string entries. The keys are
                       interpreted as regexes applied to the lowercased filenames via re.fullmatch, and each value must
                       either be the string "ignore" to skip matching files, or a layer name such as "top.copper",
                       "bottom.soldermask" or "all.outline".''')(fun)
    return fun

def duplicates_option(fun):
    return click.option('--duplicates', type=click.Choice(DUPLICATE_POLICIES), default='last', help='''What to do
                        if several files map to the same layer: use the last one in name order (default), use the
                        first one, or fail.''')(fun)


@click.group()
@click.option('--version', is_flag=True, callback=_print_version, expose_value=False, is_eager=True)
def cli():
    """ Render top and bottom side previews of a zip of Gerber and Excellon files, and inspect how the files in it are
    mapped to board layers. """
    pass


@cli.command()
@warnings_option
@input_map_options
@duplicates_option
@click.option('-n', '--board-name', help='Board name passed to the renderer. Default: archive file name')
@click.option('--margin', type=float, default=0.0, help='Add space (in mm) around the board inside the viewport')
@click.option('--workdir', type=click.Path(file_okay=False, path_type=Path), envvar='STACKVIEW_WORKDIR',
              help='Create temporary working directories here instead of the system temp dir')
@click.argument('archive', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('outdir', type=click.Path(file_okay=False, path_type=Path), default='.')
def render(archive, outdir, format_warnings, input_map, use_builtin_name_rules, duplicates, board_name, margin,
           workdir):
    """ Render ARCHIVE into top.svg and bottom.svg inside OUTDIR (default: current directory). """
    classifier = _classifier(input_map, use_builtin_name_rules)

    with warnings.catch_warnings():
        warnings.simplefilter(format_warnings)
        try:
            board = render_archive_sync(archive, workdir=workdir, board_name=board_name,
                                        renderer=GerbonaraRenderer(margin=margin), classify=classifier,
                                        duplicates=duplicates)
        except StackupError as e:
            raise click.ClickException(e.user_message)

    outdir.mkdir(parents=True, exist_ok=True)
    for name, svg in [('top.svg', board.top_svg), ('bottom.svg', board.bottom_svg)]:
        (outdir / name).write_text(svg, encoding='utf-8')
        click.echo(f'Wrote {outdir / name}')


@cli.command()
@input_map_options
@click.argument('filenames', nargs=-1, required=True)
def classify(filenames, input_map, use_builtin_name_rules):
    """ Print the layer each of the given file names would be mapped to, and the rule set that decided it. The files
    don't need to exist. """
    classifier = _classifier(input_map, use_builtin_name_rules)

    for fn in filenames:
        strategy, result = classifier.explain(fn)
        match result:
            case RoleFound(role=role):
                click.echo(f'{fn}\t{role}\t{strategy.name}')
            case Ignored(reason=reason):
                click.echo(f'{fn}\t-\tignored ({reason})')
            case _:
                click.echo(f'{fn}\t-\tunrecognized')


@cli.command()
@warnings_option
@input_map_options
@duplicates_option
@click.argument('archive', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def layers(archive, format_warnings, input_map, use_builtin_name_rules, duplicates):
    """ Extract ARCHIVE and print which file is used for which layer, without rendering anything. """
    classifier = _classifier(input_map, use_builtin_name_rules)

    with warnings.catch_warnings(), tempfile.TemporaryDirectory(prefix='stackview-') as tmpdir:
        warnings.simplefilter(format_warnings)
        try:
            extract(archive, tmpdir)
            stack = assemble(walk(tmpdir), classify=classifier, duplicates=duplicates, required=())
        except StackupError as e:
            raise click.ClickException(e.user_message)

    click.echo(f'Layers of {archive.name}:')
    click.echo(stack.format_layer_map())
    if (missing := stack.missing()):
        raise click.ClickException(f'Missing required layers: {", ".join(map(str, missing))}')


@cli.command()
@click.option('-h', '--host', default=None, help='Hostname to listen on. Defaults to localhost.')
@click.option('-p', '--port', type=int, default=3000, envvar='PORT', help='Port to listen on. Defaults to $PORT or 3000')
@click.option('--workdir', type=click.Path(file_okay=False, path_type=Path), envvar='STACKVIEW_WORKDIR',
              help='Create per-request working directories here instead of the system temp dir')
@duplicates_option
def serve(host, port, workdir, duplicates):
    """ Run the preview web service. POST a zip file as multipart field "gerber" to / to get back a zip containing
    top.svg and bottom.svg. """
    app = server.create_app({
        'STACKVIEW_WORKDIR': workdir,
        'STACKVIEW_DUPLICATES': duplicates,
        })
    app.run(host=host, port=port, use_reloader=False, debug=False)


if __name__ == '__main__':
    cli()
