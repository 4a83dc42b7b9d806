from phasefield import load_system, locate
from phasefield.cli import format_result

model = '''
inline:
[system]
label = "Duffing"
dx = "y"
dy = "-b*y - a*x - x^3"

[params]
a = -1.0
b = 0.3

[domain]
x = [-2.5, 2.5]
y = [-2.5, 2.5]

[analysis]
grid_size = 41
'''

spec = load_system(model)
for line in format_result(locate(spec.system, spec.analysis)):
    print(line)
