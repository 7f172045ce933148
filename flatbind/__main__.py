import argparse
import os
import sys

from flatbind import logging as flatbind_logging
from flatbind.codegen import (GeneratorOptions, generate_file, make_rule,
                              render_runtime_header, save_generated_file)
from flatbind.errors import (SchemaConsistencyError, SchemaLoadError,
                             UnrepresentableTypeError)
from flatbind.schema import load_schema
from flatbind.utils import try_load_config

logger = flatbind_logging.get_logger(__name__)


def _add_common_arguments(parser):
    parser.add_argument(
        '--config',
        '-c',
        type=str,
        dest='config_file',
        help='The configuration file to use'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Console log level (DEBUG, INFO, WARNING, ERROR), overrides the config'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Also write text logs into this directory'
    )


def parse_generate(parser):
    parser.add_argument(
        'schema_file',
        type=str,
        help='The parsed schema document (JSON) to generate bindings for'
    )

    parser.add_argument(
        '--output-dir',
        '-o',
        type=str,
        default='.',
        help='The directory the generated header is written to'
    )

    _add_common_arguments(parser)


def parse_make_rule(parser):
    parser.add_argument(
        'schema_file',
        type=str,
        help='The parsed schema document (JSON)'
    )

    parser.add_argument(
        '--output-dir',
        '-o',
        type=str,
        default='.',
        help='The directory the generated header would be written to'
    )

    parser.add_argument(
        '--schema-path',
        type=str,
        default=None,
        help='The .fbs file the rule depends on, default to the schema document itself'
    )

    _add_common_arguments(parser)


def parse_runtime_header(parser):
    parser.add_argument(
        '--output-dir',
        '-o',
        type=str,
        default='.',
        help='The directory flatbuffers_ue4.h is written to'
    )

    _add_common_arguments(parser)


def _setup(args):
    config = try_load_config(args.config_file)
    flatbind_logging.configure_logging(
        config,
        console_level_override=args.log_level,
        log_dir_override=args.log_dir,
    )
    return config, GeneratorOptions.from_config(config)


def generate(parser, args):
    config, options = _setup(args)
    try:
        schema = load_schema(args.schema_file)
        ok = generate_file(schema, args.output_dir, options)
    except (SchemaLoadError, SchemaConsistencyError) as e:
        logger.error("Invalid schema %s: %s", args.schema_file, e)
        sys.exit(1)
    except UnrepresentableTypeError as e:
        logger.error("Cannot generate bindings for %s: %s", args.schema_file, e)
        sys.exit(1)

    if not ok:
        sys.exit(1)
    sys.exit(0)


def print_make_rule(parser, args):
    config, options = _setup(args)
    try:
        schema = load_schema(args.schema_file)
    except (SchemaLoadError, SchemaConsistencyError) as e:
        logger.error("Invalid schema %s: %s", args.schema_file, e)
        sys.exit(1)

    schema_path = args.schema_path or args.schema_file
    print(make_rule(schema, args.output_dir, schema_path, options))
    sys.exit(0)


def write_runtime_header(parser, args):
    _setup(args)
    path = os.path.join(args.output_dir, 'flatbuffers_ue4.h')
    if not save_generated_file(path, render_runtime_header()):
        sys.exit(1)
    sys.exit(0)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='flatbind: Unreal Engine 4 bindings for FlatBuffers schemas'
    )

    subparsers = parser.add_subparsers(
        dest='subcommand',
        description='valid subcommands for flatbind',
        help='Use one of these subcommands followed by -h for additional help',
        required=True
    )

    generate_parser = subparsers.add_parser(
        'generate',
        help='Generate the <file>_ue4_generated.h header for a schema'
    )

    make_rule_parser = subparsers.add_parser(
        'make-rule',
        help='Print a make dependency rule for the generated header'
    )

    runtime_header_parser = subparsers.add_parser(
        'runtime-header',
        help='Write the flatbuffers_ue4.h vector helper header'
    )

    parse_generate(generate_parser)
    parse_make_rule(make_rule_parser)
    parse_runtime_header(runtime_header_parser)

    args = parser.parse_args(argv)

    match args.subcommand:
        case 'generate':
            generate(parser, args)
        case 'make-rule':
            print_make_rule(parser, args)
        case 'runtime-header':
            write_runtime_header(parser, args)
        case _:
            parser.print_help()


if __name__ == '__main__':
    main()
