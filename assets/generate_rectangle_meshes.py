import logging

from maxwelldg.fea.pre import generate_rectangle_mesh
from maxwelldg.logging_config import setup_logging

X = 1.0
Y = 1.0

N_X = 4
N_Y = 4

setup_logging(logging.INFO)

for coefficient, name in zip([1, 2, 4], ["cavity-coarse", "cavity-medium", "cavity-fine"]):
    for recombine, suffix in [(True, "quad"), (False, "tri")]:
        stats = generate_rectangle_mesh(
            f"{name}-{suffix}.msh",
            sx=X,
            sy=Y,
            nx=N_X * coefficient,
            ny=N_Y * coefficient,
            recombine=recombine,
        )
        print(f"{stats.filepath}: {stats.num_nodes} nodes, {stats.num_elements} elements")
