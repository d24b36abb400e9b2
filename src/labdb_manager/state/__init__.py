from labdb_manager.state.staging import GitStaging, StagingState

__all__ = ["GitStaging", "StagingState"]
