"""
Terminal-side collaborators of the timeline pipeline.

Modules:
    - tailer: Polling readers for growing .jfon files
    - source_index: Listing of trace files for the `sources` command
    - views: Text layout and the curses timeline viewer

Architecture:
    Everything runs on one thread. The curses loop calls
    TimelineModel.refresh() every poll interval; the model pulls new lines
    from the tailers and the view redraws from the returned snapshot.
"""
