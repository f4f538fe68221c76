"""
Profiling orchestration for locally built executables.

This package sequences a release build and external profiling tools (a
statistical sampler and an instrumentation simulator) and reduces their
captures into a flamegraph image or a ranked list of hot source lines.
"""
