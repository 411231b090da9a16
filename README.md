# aubatch

`aubatch` is a small batch job scheduler. You submit jobs at an interactive
prompt. A scheduler thread moves them into a queue ordered by the current
policy. A dispatcher thread then runs them one at a time. Finished jobs
collect in a completed queue, and the scheduler reports turnaround time,
waiting time and throughput for them.

It supports three scheduling policies:

- **FCFS**: first come, first served (ordered by arrival time)
- **SJF**: shortest job first (ordered by CPU time)
- **Priority**: the lowest priority number runs first (the default)

## Installation

```
pip install .
```

Python 3.10 or later is required. There are no runtime dependencies.

## Starting the scheduler

```
aubatch [--policy fcfs|sjf|priority] [--data-dir DIR]
```

- `--policy` sets the starting scheduling policy. The default is `priority`.
- `--data-dir` sets where the `performance` command writes its results. The default is `data`.

The program prints a welcome line and then a `>` prompt, and reads commands from standard input. Type `help` to see the commands. An empty line shows the prompt again. A line with an unknown command is ignored. While a job is running, the prompt is preceded by `job running: <name>`.

## Commands

| Command | Short | Meaning |
|---|---|---|
| `help` | `h`, `?` | Show the help menu. |
| `run <job> <time> [<pri>]` | `r` | Submit a job named `<job>` that needs `<time>` seconds, with priority `<pri>` (default 0). Prints the queue length and the expected waiting time. |
| `list` | `l` | Show the policy, the running job, and every submitted and scheduled job. |
| `jobs` | `j` | Show the size of the submitted, scheduled and completed queues. |
| `fcfs`, `sjf`, `priority` | | Switch the scheduling policy and re-sort the scheduled queue. |
| `test <benchmark> <policy> <num_of_jobs> <priority_levels> <min_CPU_time> <max_CPU_time> [<arrival_rate>]` | | See below. |
| `batch <benchmark> <policy> <num_of_jobs> <priority_levels> <min_CPU_time> <max_CPU_time> [<arrival_rate>]` | `b` | See below. |
| `reset` | | Clear the completed queue. Refused while jobs are queued or running. |
| `statistics` | `s` | Print the per-job and overall report for the completed queue. |
| `performance` | `p` | Run the benchmark suite and write `<data-dir>/performance_data.csv`. |
| `quit` | `q` | See below. |
| `quit force` | `q f` | Print the queue sizes and statistics, then quit at once, abandoning queued jobs. |

The `test` command:

- clears the completed queue and sets the policy;
- submits `<num_of_jobs>` jobs, pausing `<arrival_rate>` seconds between them;
- waits for the jobs to finish and prints statistics.

The `batch` command:

- sets the policy and submits the jobs at once, keeping the completed queue;
- returns to the prompt straight away;
- accepts `<arrival_rate>` but does not pause between jobs.

The `quit` command behaves in two ways:

- With no jobs queued or running, it quits at once.
- Otherwise it stops reading commands. It waits for the remaining jobs to finish and then prints statistics.

Rules for the arguments of `test` and `batch`:

- `<policy>` is one of `fcfs`, `sjf` or `priority`, in any letter case.
- `<benchmark>` may be at most 20 characters.
- `<num_of_jobs>` is between 1 and 500.
- Both CPU times must be positive, and the minimum must not exceed the maximum.

Numeric arguments are read like C's `atoi`/`atof`: a leading number is used and anything after it is ignored.

### Example session

```
>run compile 2 1
>run link 0.5 0
>list
>sjf
>test bench fcfs 5 3 0.5 2 0.1
>statistics
>quit
```

## The performance report

`performance` runs nine benchmarks. Each of the three policies runs at each submission interval of 0.1, 0.5 and 1.0 seconds. Every benchmark clears the completed queue and submits 25 jobs. Their CPU times fall evenly from 3 to 1 seconds, across 3 priority levels. When the jobs have finished, one row is written to the CSV file:

```
testij,policy,arrival_rate,throughput,response_time_mean,max_response_time,min_response_time,response_deviation
```

Response time is finish time minus arrival time. Throughput is the number of jobs divided by the span from the earliest arrival to the latest finish.

## The worker

The dispatcher runs each job as a separate process, `python -m aubatch.worker <seconds>`. That process simply sleeps for the job's CPU time. It can also be started on its own:

```
aubatch-worker 1.5
```

## Using it from Python

| Module | Contents |
|---|---|
| `aubatch.jobs` | `Job`, `Policy`, and the queue helpers `insert_sorted`, `resort`, `waiting_time` and `time_left`. |
| `aubatch.engine` | The threaded `Scheduler`, `Statistics`, `pick_next` and `run_worker`. |
| `aubatch.performance` | `PerformanceResult`, `performance_jobs` and `run_performance`. |
| `aubatch.commands` | `Shell`, which interprets command lines, plus `BatchSpec`, `CommandError` and `QuitRequested`. |

A `Scheduler` takes a `runner` callable that is given each job's CPU time. It can be used as a context manager, which starts and stops its threads:

```python
import time

from aubatch.engine import Scheduler
from aubatch.jobs import Job, Policy

with Scheduler(policy=Policy.SJF, runner=time.sleep) as scheduler:
    scheduler.submit(
        Job(id=1, name="demo", priority=0, cpu_time=0.2, arrival_time=scheduler.now())
    )
    scheduler.wait_until_idle(poll=0.1)
    print(scheduler.statistics_report())
```

## What it does not do

- Jobs do not run real programs. Each job only occupies its CPU time by sleeping in a worker process.
- Queues and statistics are kept in memory only and are lost when the program exits.
- Nothing is distributed across machines.