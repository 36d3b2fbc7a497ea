from colorlights.strategies.base import NoPlanError, Strategy
from colorlights.strategies.linear_algebra_minweight import LinearAlgebraMinWeight
from colorlights.strategies.random_click import RandomClick
