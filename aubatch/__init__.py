"""A threaded batch job scheduler with FCFS, SJF and priority policies, an
interactive command shell and a benchmark suite."""

__version__ = "1.0.0"