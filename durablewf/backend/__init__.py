"""Storage backends for workflow instances, events and activity tasks."""