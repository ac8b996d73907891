# gotenberg

The core of a document conversion service. It provides a small module system
and the pieces that its modules share.

## What is in the package

- **Modules** (`gotenberg.modules`, `gotenberg.context`). Register a module
  with `must_register_module`. The module's `descriptor()` returns a
  `ModuleDescriptor` that holds an `id`, a factory `new` and an optional
  `flag_set`. `get_module_descriptors()` lists the registered descriptors,
  sorted by id. A `Context` creates module instances when they are first asked
  for through `Context.modules(kind)` or `Context.module(kind)`. It provisions
  them (`Provisioner`), validates them (`Validator`) and caches them. Any
  failure raises `ModuleLoadError`. A module can also be an `App`, a
  `SystemLogger` or a `Debuggable`.
- **Flags** (`gotenberg.flags`). A `FlagSet` defines string, string-slice,
  boolean, int, int64, float and duration flags, and parses `--name=value` or
  `--name value` arguments. `ParsedFlags` gives typed access through
  `must_string`, `must_bool`, `must_duration`, `must_human_readable_bytes`
  (for example `"1MB"` gives 1000000), `must_regexp` and so on. Each one has a
  `must_deprecated_*` variant that reads the deprecated flag when it was set
  explicitly and the new flag otherwise. Any problem raises `FlagError`. The
  module also provides `parse_duration`, `format_duration` and `parse_bytes`.
- **Process supervision** (`gotenberg.supervisor`). `ProcessSupervisor` wraps a
  `Process`, which is any object with `start`, `stop` and `healthy`. The
  supervisor runs tasks one at a time and starts the process on first use. It
  restarts the process when it is unhealthy, and also after `max_req_limit`
  tasks. When more than `max_queue_size` tasks are waiting, it raises
  `MaximumQueueSizeExceeded`. `req_queue_size()` and `restarts_count()` report
  its state.
- **Commands** (`gotenberg.command`). `command` and `command_context` start an
  external program in its own process group, so `Command.kill` stops the whole
  process tree. `Command.exec` waits until the program ends or its context is
  done. It returns 0 on success and otherwise raises `CommandError`, whose
  `exit_code` says what went wrong.
- **Contexts** (`gotenberg.lifecycle`). `CancelContext` is a cancellation
  token with an optional timeout. Once it is done, it reports `Canceled` or
  `DeadlineExceeded`. An app's `stop` can raise `CancelGracefulShutdown` to end
  the shutdown early.
- **Helpers**:
  - `gotenberg.sorting.alphanumeric_sort` sorts file names.
  - `gotenberg.filter.filter_deadline` checks a string against allow and deny
    regular expressions and raises `Filtered` or `DeadlineExceeded`.
  - `gotenberg.gc.garbage_collect` removes expired files.
  - `gotenberg.fs.FileSystem` provides isolated working directories.
  - `gotenberg.env.string_env` and `gotenberg.env.int_env` look up environment
    variables.
  - `gotenberg.debug.build_debug` and `gotenberg.debug.debug` record and return
    debug data.
  - `gotenberg.leveled.LeveledLogger` is a logging adapter.
  - `gotenberg.metrics.Metric` holds a metric.
- **PDF engine contracts** (`gotenberg.pdfengine`): the `PdfEngine` and
  `PdfEngineProvider` protocols, `SplitMode`, `PdfFormats`, `PdfA`, and the
  matching "not supported" errors.

## What the package does not do

The package ships no modules of its own. It has no PDF engine implementation,
no HTTP API and no converters; it only defines the contracts for them. When
you run the `gotenberg` command with no registered modules, it parses flags,
waits for a signal and exits.

## Installation

```
pip install .
```

## Running

```
gotenberg
```

The command does the following, in order:

1. Prints a banner and lists the registered modules.
2. Parses the flags. `--help` prints them.
3. Applies environment overrides.
4. Starts every `App` module.
5. Prints the messages of every `SystemLogger` module.
6. Runs until SIGINT or SIGTERM.
7. Stops the apps within the graceful shutdown duration. A second SIGINT
   cancels the shutdown.

Built-in flags:

| Flag | Default | Purpose |
| --- | --- | --- |
| `--gotenberg-graceful-shutdown-duration` | `30s` | Time allowed for a graceful shutdown |
| `--gotenberg-build-debug-data` | `true` | Record debug data on startup |

You can also set any flag through an environment variable. The variable name is
the flag name in upper case, with dashes replaced by underscores, for example
`GOTENBERG_GRACEFUL_SHUTDOWN_DURATION=10s`. For slice flags, the
comma-separated value replaces the current values.

## Sorting file names

```python
from gotenberg.sorting import alphanumeric_sort

alphanumeric_sort(["sample1_10.pdf", "sample1_2.pdf", "sample1_1.pdf"])
# ['sample1_1.pdf', 'sample1_2.pdf', 'sample1_10.pdf']
```

The sort uses one number from each name:

- A numeric prefix comes first.
- Without a prefix, the number just before the extension is used.
- Without either, a trailing number is used.

Names that have no number at all come after every numbered name, in
lexicographic order.

## Environment lookups

```python
from gotenberg.env import int_env, string_env

string_env("HOME")         # raises EnvironmentVariableError if missing or empty
int_env("MAX_WORKERS")     # also raises if the value is not an integer
```

## Tests

```
pip install .[test]
pytest
```