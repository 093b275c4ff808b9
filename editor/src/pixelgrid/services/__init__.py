"""Editor services: tool algorithms, compositing, selection, session and project files"""
