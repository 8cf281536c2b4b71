"""TaskFlow: project and task management API."""
