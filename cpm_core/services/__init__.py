from cpm_core.services.scheduling import SchedulingEngine, SchedulingPolicy

__all__ = ["SchedulingEngine", "SchedulingPolicy"]
