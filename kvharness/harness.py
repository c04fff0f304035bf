# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
# Modifications Copyright OpenSearch Contributors. See
# GitHub history for details.
# Licensed to Elasticsearch B.V. under one or more contributor
# license agreements. See the NOTICE file distributed with
# this work for additional information regarding copyright
# ownership. Elasticsearch B.V. licenses this file to you under
# the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#	http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

import argparse
import logging
import os
import platform
import sys
import time

from kvharness import PROGRAM_NAME, BANNER, check_python_version
from kvharness import config, exceptions, log, paths
from kvharness.builder import builder
from kvharness.utils import console


def create_arg_parser():
    def positive_number(v):
        value = int(v)
        if value <= 0:
            raise argparse.ArgumentTypeError(f"must be positive but was {value}")
        return value

    def port(v):
        value = positive_number(v)
        if value > 65535:
            raise argparse.ArgumentTypeError(f"must be a valid port but was {value}")
        return value

    def positive_float(v):
        value = float(v)
        if value <= 0:
            raise argparse.ArgumentTypeError(f"must be positive but was {value}")
        return value

    def add_service_name(subparser):
        subparser.add_argument(
            "--service-name",
            help="Define the executable name of the service; running processes with this name are terminated "
                 "(default: raft-key-value-rocks).")

    def add_work_dir(subparser):
        subparser.add_argument(
            "--work-dir",
            help="Define the directory that holds node log files and persisted state (default: current directory).")

    parser = argparse.ArgumentParser(prog=PROGRAM_NAME,
                                     description=BANNER + "\n\n A bring-up and smoke-test harness for a replicated key-value service",
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--configuration-file",
        help=f"Define the path to the harness configuration file (default: {config.default_config_file()}).",
        default=None)
    parser.add_argument(
        "--quiet",
        help="Suppress as much as output as possible (default: false).",
        default=False,
        action="store_true")

    subparsers = parser.add_subparsers(
        title="subcommands",
        dest="subcommand",
        help="")
    subparsers.required = True

    start_parser = subparsers.add_parser("start", help="Clean up, launch all nodes and initialize a single-node cluster")
    start_parser.add_argument(
        "--binary-path",
        help="Define the path to the service binary (default: ./target/debug/raft-key-value-rocks).")
    add_service_name(start_parser)
    start_parser.add_argument(
        "--source-dir",
        help="Define the directory in which the build command is run (default: current directory).")
    start_parser.add_argument(
        "--build-command",
        help="Define the command that builds the service binary (default: cargo build).")
    start_parser.add_argument(
        "--skip-build",
        help="Use the existing service binary without building it (default: false).",
        default=False,
        action="store_true")
    add_work_dir(start_parser)
    start_parser.add_argument(
        "--host",
        help="Define the host that all nodes bind to (default: 127.0.0.1).")
    start_parser.add_argument(
        "--node-count",
        type=positive_number,
        help="Define the number of nodes to launch (default: 3).")
    start_parser.add_argument(
        "--http-port-base",
        type=port,
        help="Define the client-facing HTTP port of the first node; node i uses base + i - 1 (default: 21001).")
    start_parser.add_argument(
        "--rpc-port-base",
        type=port,
        help="Define the inter-node RPC port of the first node; node i uses base + i - 1 (default: 22001).")
    start_parser.add_argument(
        "--readiness",
        choices=builder.READINESS_POLICIES,
        help="Define how to decide that a node is ready: poll its HTTP address or wait a fixed delay (default: poll).")
    start_parser.add_argument(
        "--readiness-timeout",
        type=positive_float,
        help="Define how many seconds to poll a node before giving up (default: 30).")
    start_parser.add_argument(
        "--service-env",
        help="Define a comma-separated list of key:value pairs that are set in the environment of every node "
             "(default: RUST_LOG:trace,RUST_BACKTRACE:full).")

    cleanup_parser = subparsers.add_parser("cleanup", help="Terminate running service nodes and delete their persisted state")
    add_service_name(cleanup_parser)
    add_work_dir(cleanup_parser)

    rpc_parser = subparsers.add_parser("rpc", help="Send a single request to a node")
    rpc_parser.add_argument(
        "address",
        help="The client-facing address of the node (host:port).")
    rpc_parser.add_argument(
        "path",
        help="The request path, e.g. /cluster/metrics.")
    rpc_parser.add_argument(
        "--body",
        help="A JSON request body. Requests with a body are sent as POST, all others as GET.",
        default=None)

    return parser


def print_help_on_errors():
    heading = "Getting further help:"
    console.println(console.format.bold(heading))
    console.println(console.format.underline_for(heading))
    console.println(f"* Check the log files in {paths.logs()} for errors.")
    console.println("* Check the node log files (n<id>.log) in the work directory for errors of the service itself.")


def configure_start_params(args, cfg):
    cfg.add_if_set(config.Scope.applicationOverride, "service", "binary.path", args.binary_path)
    cfg.add_if_set(config.Scope.applicationOverride, "service", "source.dir", args.source_dir)
    cfg.add_if_set(config.Scope.applicationOverride, "service", "build.command", args.build_command)
    if args.skip_build:
        cfg.add(config.Scope.applicationOverride, "service", "skip.build", True)
    cfg.add_if_set(config.Scope.applicationOverride, "service", "env", args.service_env)
    cfg.add_if_set(config.Scope.applicationOverride, "cluster", "host", args.host)
    cfg.add_if_set(config.Scope.applicationOverride, "cluster", "node.count", args.node_count)
    cfg.add_if_set(config.Scope.applicationOverride, "cluster", "http.port.base", args.http_port_base)
    cfg.add_if_set(config.Scope.applicationOverride, "cluster", "rpc.port.base", args.rpc_port_base)
    cfg.add_if_set(config.Scope.applicationOverride, "launcher", "readiness", args.readiness)
    cfg.add_if_set(config.Scope.applicationOverride, "launcher", "readiness.timeout", args.readiness_timeout)


def configure_cleanup_params(args, cfg):
    cfg.add_if_set(config.Scope.applicationOverride, "service", "name", args.service_name)
    cfg.add_if_set(config.Scope.applicationOverride, "cluster", "work.dir", args.work_dir)


def dispatch_sub_command(arg_parser, args, cfg):
    sub_command = args.subcommand

    try:
        if sub_command == "start":
            configure_cleanup_params(args, cfg)
            configure_start_params(args, cfg)
            builder.start(cfg)
        elif sub_command == "cleanup":
            configure_cleanup_params(args, cfg)
            builder.cleanup(cfg)
        elif sub_command == "rpc":
            cfg.add(config.Scope.applicationOverride, "rpc", "address", args.address)
            cfg.add(config.Scope.applicationOverride, "rpc", "path", args.path)
            cfg.add(config.Scope.applicationOverride, "rpc", "body", args.body)
            builder.rpc(cfg)
        else:
            arg_parser.error(f"Unknown subcommand [{sub_command}]")
        return True
    except exceptions.HarnessError as e:
        logging.getLogger(__name__).exception("Cannot run subcommand [%s].", sub_command)
        msg = str(e.message)
        nesting = 0
        while hasattr(e, "cause") and e.cause:
            nesting += 1
            e = e.cause
            if hasattr(e, "message"):
                msg += "\n%s%s" % ("\t" * nesting, e.message)
            else:
                msg += "\n%s%s" % ("\t" * nesting, str(e))

        console.error("Cannot %s. %s" % (sub_command, msg))
        console.println("")
        print_help_on_errors()
        return False
    except BaseException as e:
        logging.getLogger(__name__).exception("A fatal error occurred while running subcommand [%s].", sub_command)
        console.error("Cannot %s. %s." % (sub_command, e))
        console.println("")
        print_help_on_errors()
        return False


def main():
    check_python_version()
    log.install_default_log_config()
    log.configure_logging()
    logger = logging.getLogger(__name__)
    start = time.time()

    # Early init of console output so we start to show everything consistently.
    console.init(quiet=False)

    arg_parser = create_arg_parser()
    args = arg_parser.parse_args()

    console.init(quiet=args.quiet)
    console.println(BANNER)

    cfg = config.Config(config_file=args.configuration_file)
    if cfg.config_present():
        cfg.load_config()
    elif args.configuration_file:
        console.error(f"Configuration file [{cfg.config_file}] does not exist.")
        sys.exit(64)

    logger.info("OS [%s]", str(platform.uname()))
    logger.info("Python [%s]", str(sys.implementation))
    logger.info("Working directory [%s]", os.getcwd())
    logger.debug("Command line arguments: %s", args)

    success = dispatch_sub_command(arg_parser, args, cfg)

    end = time.time()
    if success:
        console.println("")
        console.info("SUCCESS (took %d seconds)" % (end - start), overline="-", underline="-")
    else:
        console.println("")
        console.info("FAILURE (took %d seconds)" % (end - start), overline="-", underline="-")
        sys.exit(64)


if __name__ == "__main__":
    main()
