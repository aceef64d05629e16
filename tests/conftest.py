"""
Shared fixtures: a fake `container` executable and an in-process runner.
"""
import json
import os
import stat
import subprocess
import sys
import textwrap

import pytest

from ccompose.RUNNERS.process_runner import parse_inspection

FAKE_CONTAINER = textwrap.dedent('''\
    #!{python}
    import json, sys
    STATE = {state!r}
    CALLS = {calls!r}

    args = sys.argv[1:]
    with open(CALLS, "a") as f:
        f.write(json.dumps(args) + "\\n")
    with open(STATE) as f:
        state = json.load(f)

    def name_of(args):
        return args[args.index("--name") + 1] if "--name" in args else args[-1]

    command = args[0] if args else ""
    if command == "inspect":
        name = args[1]
        if name in state.get("broken", []):
            print("this is not json")
        elif name in state.get("missing", []):
            sys.stderr.write("container not found: " + name + "\\n")
            sys.exit(1)
        elif name in state.get("status", {{}}):
            print(json.dumps([{{"status": state["status"][name], "networks": [
                {{"address": "192.168.64.2/24", "gateway": "192.168.64.1",
                  "hostname": name + ".test.", "network": "default"}}]}}]))
        else:
            print("[]")
    elif command == "run":
        name = name_of(args)
        if name in state.get("fail_start", []):
            sys.stderr.write("failed to start " + name + "\\n")
            sys.exit(1)
        if "--detach" in args:
            print(name + "-id")
        else:
            print("ARGS " + json.dumps(args))
            sys.exit(state.get("run_exit", 0))
    elif command == "stop":
        if args[1] in state.get("fail_stop", []):
            sys.stderr.write("failed to stop " + args[1] + "\\n")
            sys.exit(1)
    else:
        sys.exit(64)
''')


class FakeContainer:
    """
    A `container` executable whose answers are driven by a JSON state file.
    """
    def __init__(self, root):
        self.path = str(root / "container")
        self.state_path = str(root / "container-state.json")
        self.calls_path = str(root / "container-calls.log")
        self.set_state()
        with open(self.path, "w") as f:
            f.write(FAKE_CONTAINER.format(python=sys.executable, state=self.state_path, calls=self.calls_path))
        os.chmod(self.path, os.stat(self.path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def set_state(self, **state):
        with open(self.state_path, "w") as f:
            json.dump(state, f)

    def calls(self):
        if not os.path.exists(self.calls_path):
            return []
        with open(self.calls_path) as f:
            return [json.loads(line) for line in f if line.strip()]

    def commands(self):
        return [c[0] for c in self.calls()]


@pytest.fixture
def fake_container(tmp_path):
    if os.name == "nt":
        pytest.skip("fake container executable needs a POSIX shebang")
    return FakeContainer(tmp_path)


class FakeRunner:
    """
    In-process stand-in for ContainerRunner.

    inspect_outputs maps a service name to the stdout of `container inspect`,
    or to an exception to raise. Failures map a service name to stderr.
    """
    binary = "container"

    def __init__(self, inspect_outputs=None, start_failures=None, stop_failures=None, run_exit=0):
        self.inspect_outputs = inspect_outputs or {}
        self.start_failures = start_failures or {}
        self.stop_failures = stop_failures or {}
        self.run_exit = run_exit
        self.calls = []

    def inspect(self, service, args):
        self.calls.append(list(args))
        output = self.inspect_outputs.get(service, "[]")
        if isinstance(output, Exception):
            raise output
        return parse_inspection(service, output)

    def run(self, args):
        self.calls.append(list(args))
        failures = self.start_failures if args[0] == "run" else self.stop_failures
        name = args[2] if args[0] == "run" else args[1]
        if name in failures:
            return subprocess.CompletedProcess(args, 1, "", failures[name])
        return subprocess.CompletedProcess(args, 0, f"{name}-id\n", "")

    def run_attached(self, args):
        self.calls.append(list(args))
        return self.run_exit

    def commands(self):
        return [c[0] for c in self.calls]


def running(status="running"):
    return json.dumps([{"status": status, "networks": []}])
