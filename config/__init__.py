"""Configuration package"""
from config.settings import Config, DevelopmentConfig, ProductionConfig
from config.testing import TestingConfig

# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

__all__ = ['Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config']
