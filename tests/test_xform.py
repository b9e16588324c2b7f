import pytest
from csgeval.xform import *
## unit tests for csgeval xform.py


def close(a, b):
    return all(abs(x - y) < epsilon for x, y in zip(a, b))


class TestXform:
    """unit tests for matrix operations behind the transform nodes"""

    def test_matrix(self):
        foo = Matrix([[1,2,3,4],[5,6,7,8],[9,10,11,12],[13,14,15,16]])
        bar = Matrix([[1,0,0,1],[0,1,0,1],[0,0,1,1],[0,0,0,1]])
        baz = [1, 2, 3, 1]
        I = Matrix()
        assert(I.mul(bar).m == bar.m)
        assert(I.mul(foo).m == foo.m)
        assert(foo.mul(I).m == foo.m)
        assert(I.mul(I).m == I.m)
        assert(foo.mul(bar).m == [[1,2,3,10],[5,6,7,26],[9,10,11,42],[13,14,15,58]])
        assert(foo.mul(baz) == [18, 46, 74, 102])
        assert(I.mul(baz) == baz)
        assert(foo.getcol(1) == [2, 6, 10, 14])
        assert(foo.rows()[1] == [5.0, 6.0, 7.0, 8.0])

    def test_copy(self):
        foo = Matrix([[1,2,3,4],[5,6,7,8],[9,10,11,12],[13,14,15,16]])
        copy = Matrix(foo)
        copy.setrow(0, [0, 0, 0, 0])
        assert foo.getrow(0) == [1, 2, 3, 4]

    def test_bad_matrices(self):
        with pytest.raises(ValueError):
            Matrix([1, 2, 3])
        with pytest.raises(ValueError):
            Matrix([[1, 0, 0, 0]] * 3 + [[0, 0, 0, "x"]])
        with pytest.raises(ValueError):
            Matrix().mul("nope")
        with pytest.raises(ValueError):
            Matrix().mul(2.0)

    def test_equality(self):
        assert Matrix() == Matrix([[1.0, 0, 0, 0], [0, 1.0, 0, 0], [0, 0, 1.0, 0], [0, 0, 0, 1.0]])
        assert Matrix().isidentity()
        assert not Translation([1, 0, 0]).isidentity()

    def test_translation(self):
        T = Translation([1, 2, 3])
        assert T.mul([0, 0, 0, 1]) == [1, 2, 3, 1]
        back = Translation([-1, -2, -3])
        assert back.mul(T).isidentity()

    def test_scale(self):
        assert Scale(2).mul([1, 1, 1, 1]) == [2, 2, 2, 1]
        assert Scale([1, 2, 3]).mul([1, 1, 1, 1]) == [1, 2, 3, 1]
        with pytest.raises(ValueError):
            Scale("big")
        with pytest.raises(ValueError):
            Scale([1, 2])

    def test_rotation(self):
        Rz = Rotation([0, 0, 1], 90)
        assert close(Rz.mul([1, 0, 0, 1]), [0, 1, 0, 1])
        back = Rotation([0, 0, 1], -90)
        assert close(back.mul([0, 1, 0, 1]), [1, 0, 0, 1])
        with pytest.raises(ValueError):
            Rotation([0, 0, 0], 45)

    def test_euler_rotation(self):
        Rx = EulerRotation(90, 0, 0)
        assert close(Rx.mul([0, 1, 0, 1]), [0, 0, 1, 1])
        ## x first, then z: x axis is untouched by Rx, then Rz takes it to y
        R = EulerRotation(90, 0, 90)
        assert close(R.mul([1, 0, 0, 1]), [0, 1, 0, 1])
