# package marker for buildmart
