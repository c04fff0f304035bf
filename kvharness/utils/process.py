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

import logging
import os
import shlex
import subprocess

import psutil


def run_subprocess_with_logging(command_line, header=None, level=logging.INFO, stdin=None, stdout=subprocess.PIPE,
                                stderr=subprocess.STDOUT, env=None, cwd=None, detach=False):
    """
    Runs the provided command line in a subprocess. All output will be captured by a logger.

    :param command_line: The command line of the subprocess to launch.
    :param header: An optional header line that should be logged (this will be logged on info level, regardless of the defined log level).
    :param level: The log level to use for output (default: logging.INFO).
    :param stdin: The stdout object returned by subprocess.Popen(stdout=PIPE) allowing chaining of shell operations with pipes
      (default: None).
    :param stdout: Where to send the subprocess' standard output. Output is only logged if this is ``subprocess.PIPE``.
    :param stderr: Where to send the subprocess' standard error (default: merged into standard output).
    :param env: Use specific environment variables (default: None).
    :param cwd: The working directory of the subprocess (default: the current working directory).
    :param detach: Whether to detach this process from its parent process (default: False).
    :return: The process exit code as an int.
    """
    logger = logging.getLogger(__name__)
    logger.debug("Running subprocess [%s] with logging.", command_line)
    command_line_args = shlex.split(command_line)
    if header is not None:
        logger.info(header)

    with subprocess.Popen(command_line_args,
                          stdout=stdout,
                          stderr=stderr,
                          universal_newlines=True,
                          env=env,
                          cwd=cwd,
                          stdin=stdin if stdin else None,
                          start_new_session=detach) as command_line_process:
        output, _ = command_line_process.communicate()
        if output:
            logger.log(level=level, msg=output)

    logger.debug("Subprocess [%s] finished with return code [%s].", command_line, str(command_line_process.returncode))
    return command_line_process.returncode


def start_detached(command_line_args, log_file_path, env=None, cwd=None, detach=True):
    """
    Starts a long-running subprocess without waiting for it. Standard output and standard error are both appended to
    ``log_file_path``.

    :param command_line_args: The program and its arguments as a list.
    :param log_file_path: The file that receives the combined output of the process.
    :param env: The complete environment of the subprocess (default: inherit the current environment).
    :param cwd: The working directory of the subprocess.
    :param detach: Whether to start the process in a new session so it survives its parent (default: True).
    :return: The ``subprocess.Popen`` object of the started process.
    """
    logger = logging.getLogger(__name__)
    logger.debug("Starting detached subprocess [%s], logging to [%s].", " ".join(command_line_args), log_file_path)
    # the child holds its own copy of the file descriptor
    with open(log_file_path, "ab") as log_file:
        return subprocess.Popen(command_line_args,
                                stdin=subprocess.DEVNULL,
                                stdout=log_file,
                                stderr=subprocess.STDOUT,
                                env=env,
                                cwd=cwd,
                                start_new_session=detach)


def is_service_process(p, service_name):
    if p.name() == service_name:
        return True
    # Linux truncates process names to 15 characters so a long name is only told apart by the command line
    cmdline = p.cmdline()
    return len(cmdline) > 0 and os.path.basename(cmdline[0]) == service_name


def find_all_service_processes(service_name):
    others = []
    for_all_other_processes(lambda p: is_service_process(p, service_name), others.append)
    return others


def for_all_other_processes(predicate, action):
    # no harakiri please
    my_pid = os.getpid()
    for p in psutil.process_iter():
        try:
            if p.pid != my_pid and predicate(p):
                action(p)
        except (psutil.ZombieProcess, psutil.AccessDenied, psutil.NoSuchProcess):
            pass


def terminate_service_instances(service_name, grace_period=3):
    """
    Sends SIGTERM to every running process of ``service_name`` (except ourselves) and kills the ones that are still
    alive after ``grace_period`` seconds.

    :param service_name: The executable name of the service.
    :param grace_period: Seconds to wait for processes to exit after SIGTERM.
    :return: A list of the processes that have been signalled.
    """
    logger = logging.getLogger(__name__)
    candidates = find_all_service_processes(service_name)
    terminated = []
    for p in candidates:
        try:
            logger.info("Terminating lingering process with PID [%s] and command line [%s].", p.pid, p.cmdline())
            p.terminate()
            terminated.append(p)
        except (psutil.ZombieProcess, psutil.NoSuchProcess):
            logger.debug("Process with PID [%s] has already terminated.", p.pid)
        except psutil.AccessDenied:
            logger.warning("Not allowed to terminate process with PID [%s].", p.pid)

    if terminated:
        _, alive = psutil.wait_procs(terminated, timeout=grace_period)
        for p in alive:
            logger.warning("Process with PID [%s] did not terminate within [%s] seconds. Killing it.", p.pid, grace_period)
            try:
                p.kill()
            except psutil.NoSuchProcess:
                pass
    return terminated
