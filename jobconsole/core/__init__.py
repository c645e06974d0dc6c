"""Core console protocol: timestamp codec and the incremental reader."""
