"""Application services — orchestration over loading and analysis."""
