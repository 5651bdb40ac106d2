"""Release synchronization pipeline.

- version: derive the Jira version name from a release tag
- extractor: discover issue keys in release notes and linked pull requests
- issue_filter: fetch issues and drop the ones that must not be updated
- orchestrator: run the pipeline for one release
"""
