"""Workshop Timer - countdown timer synchronized between a facilitator and participants"""
