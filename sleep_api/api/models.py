"""Pydantic models for API responses"""
from pydantic import BaseModel, Field
from datetime import datetime


class MessageResponse(BaseModel):
    """Confirmation and not-found/failure bodies"""
    message: str = Field(..., description="Human readable outcome")


class ErrorResponse(BaseModel):
    """Validation failure body"""
    error: str = Field(..., description="What was wrong with the request")


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    database: str = Field(..., description="Database connection status")
    timestamp: datetime = Field(..., description="Check timestamp")
