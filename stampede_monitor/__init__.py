"""
Stampede Slot Monitor
Watches Stampede booking availability and posts changes to Discord
"""

__version__ = "1.0.0"
